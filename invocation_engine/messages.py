"""User-facing message templates."""

INSTANCE_CREATION_ERROR = "Unable to create instance of class {class_name}. Error: {error}."
CONTEXT_SET_ERROR = "Unable to set the test context for class {class_name}. Error: {error}."
INITIALIZE_METHOD_THROWS = (
    "Initialization method {class_name}.{method_name} threw exception. {error}."
)
CLEANUP_METHOD_THROWS = "Cleanup method {class_name}.{method_name} threw exception. {error}."
TEST_METHOD_THROWS = "Test method {class_name}.{method_name} threw exception: \n{error}"
WRONG_THREAD = (
    "{message} The test touched an object that may only be used from the thread "
    "that created it; run UI-bound tests on the UI thread."
)
FAILED_TO_GET_EXCEPTION = (
    "Failed to obtain the exception thrown by test method {class_name}.{method_name}."
)
TEST_TIMEOUT = "Test '{method_name}' exceeded execution timeout period."
NO_EXCEPTION_THROWN = "The expected exception was not thrown."
NOT_RUNNABLE = "Test method {class_name}.{method_name} cannot be run: {reason}"
