import click
from regulation_extract.run_export import run_export_cli
from regulation_extract.inventory import inventory_cli

@click.group(
    help="Hourly regulation extract tools."
)
@click.help_option("-h", "--help")  # Add the help option at the group level
def cli():
    """Main entry point for regulation_extract commands."""
    pass

# Register the commands
cli.add_command(run_export_cli, "run")
cli.add_command(inventory_cli, "inventory")

if __name__ == "__main__":
    cli()
