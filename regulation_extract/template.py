#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Tokenizing of row templates.

A row template is a string of tokens separated by runs of ``;`` or ``:``,
for example ``_row_:$speed$;$power$;_quality_;``. Recognized tokens are
``$name$`` placeholders, ``_row_`` and ``_quality_``; anything else is
literal text.
"""

import re

ROW_TOKEN = "_row_"
QUALITY_TOKEN = "_quality_"

_DELIMITERS = re.compile(r"([;:]+)")
_PLACEHOLDER = re.compile(r"^\$([A-Za-z_]\w*)\$$")


def split_template(template):
    """Split a template into tokens, keeping the delimiter runs.

    Returns a list alternating token, delimiter, token ... so that
    ``"".join(split_template(t)) == t``.
    """
    return _DELIMITERS.split(template)


def placeholder_name(token):
    """Return the abstract parameter name of a ``$name$`` token, or None"""
    m = _PLACEHOLDER.match(token)
    return None if m is None else m.group(1)


def parameter_indices(template):
    """Assign dense indices starting at 1 to placeholder names by first appearance.

    Parameters
    ----------
    template : str
        Row template

    Returns
    -------
    indices : dict
        Mapping of abstract name to index, ordered by index
    """
    indices = {}
    for token in _DELIMITERS.split(template)[::2]:
        name = placeholder_name(token)
        if name is not None and name not in indices:
            indices[name] = len(indices) + 1
    return indices
