import functools
import importlib
import logging
import pkgutil
from collections.abc import Callable


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )


def parse_option(raw: str) -> tuple[str, object]:
    """
    Parse a ``KEY=VALUE`` client option.

    Values "true"/"false" become booleans and integer literals become
    ints; anything else is kept as a string.
    """
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"Invalid option '{raw}', expected KEY=VALUE")

    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return key, lowered == "true"

    try:
        return key, int(value)
    except ValueError:
        return key, value


def scan(package: str):
    """
    Decorator that triggers a component scan when the decorated function
    is called.
    """
    def decorator(func: Callable):

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            # Execute the scan BEFORE calling the function
            py_package = importlib.import_module(package)

            for module_info in pkgutil.iter_modules(py_package.__path__):
                module_name = f"{package}.{module_info.name}"
                importlib.import_module(module_name)

            return func(*args, **kwargs)

        return wrapper

    return decorator
