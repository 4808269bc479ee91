"""Resolution of test methods from ``module:Class.method`` paths."""

import importlib
import inspect

from invocation_engine.exceptions import TestNotFoundError
from invocation_engine.models.descriptor import ClassDescriptor, MethodDescriptor


def _public_methods(class_type: type) -> list[str]:
    return sorted(
        name
        for name, value in inspect.getmembers(class_type, inspect.isfunction)
        if not name.startswith("_")
    )


def load_test_method(path: str) -> MethodDescriptor:
    """Load a test method descriptor from its path.

    Args:
        path: Test path in ``package.module:Class.method`` form

    Returns:
        Descriptor of the method, with its class hooks resolved

    Raises:
        TestNotFoundError: If the module, class or method cannot be found

    """
    module_name, separator, qualified_name = path.partition(":")
    class_name, dot, method_name = qualified_name.rpartition(".")
    if not separator or not dot or not class_name or not method_name:
        raise TestNotFoundError(
            f"Invalid test path '{path}'. Expected 'package.module:Class.method'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise TestNotFoundError(f"Module '{module_name}' not found: {e}") from e

    class_type: object = module
    for part in class_name.split("."):
        class_type = getattr(class_type, part, None)
    if not inspect.isclass(class_type):
        available = sorted(
            name for name, value in inspect.getmembers(module, inspect.isclass)
            if value.__module__ == module.__name__
        )
        raise TestNotFoundError(
            f"Class '{class_name}' not found in '{module_name}'. "
            f"Available classes: {available}"
        )

    function = inspect.getattr_static(class_type, method_name, None)
    if not inspect.isfunction(function):
        raise TestNotFoundError(
            f"Method '{method_name}' not found on '{class_name}'. "
            f"Available methods: {_public_methods(class_type)}"
        )

    return MethodDescriptor.from_function(ClassDescriptor.from_type(class_type), function)
