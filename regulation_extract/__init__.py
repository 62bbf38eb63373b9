__version__ = "1.0.0"

from regulation_extract.buffer import Sample, TimeSeriesBuffer
from regulation_extract.config import ExportConfig, load_config
from regulation_extract.render import TemplateRenderer
from regulation_extract.arbiter import QualityArbiter
from regulation_extract.scheduler import ExportScheduler
from regulation_extract.monitor import ConnectionMonitor
from regulation_extract.registry import SourceRegistry
