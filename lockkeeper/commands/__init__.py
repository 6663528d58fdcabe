"""CLI subcommands for lockkeeper."""
