ICONS = {"SUCCESS": "✓", "WARNING": "⚠", "ERROR": "✗"}


def log(module: str, message: str, level: str = "INFO"):
    """
    Consistent logging helper.
    Prints "[Module] <icon> message" so every layer reads the same in the console.
    """
    icon = ICONS.get(level, "ℹ")
    print(f"[{module}] {icon} {message}")
