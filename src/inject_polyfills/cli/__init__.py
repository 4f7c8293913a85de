"""
CLI Subpackage.

Contains the command-line entry point (``__main__``) that applies the plugin
to a single Python file.
"""
