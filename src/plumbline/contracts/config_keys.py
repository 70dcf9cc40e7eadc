# src/plumbline/contracts/config_keys.py
"""Plugin configuration keys and values the execution engine reads."""

# Key selecting the role/kind every plugin is dispatched on
PLUGIN_TYPE = "plugin_type"

# Literal script value that means "no script"
NULL_SCRIPT = "null"
