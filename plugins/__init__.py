"""Connector plugins. Each plugin package exposes PLUGIN_NAME and migration_scripts()."""
