"""Logger lookup for Solfege Tuner modules."""
import logging

PACKAGE_LOGGER = "solfege_tuner"


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger for a module, rooted in the package namespace.

    Modules run as scripts report as the package itself, and names from
    outside the package are nested under it, so the levels and handler
    installed by logging_config always apply.

    Args:
        name: Module name, normally __name__ (e.g., 'solfege_tuner.solfege')

    Returns:
        The logger for that name
    """
    if name == "__main__":
        name = PACKAGE_LOGGER
    elif name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
