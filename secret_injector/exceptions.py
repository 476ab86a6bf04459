class InjectorException(Exception):
    """Base class for secret injector errors."""


class DecodeError(InjectorException):
    """The admission review or the object it carries could not be decoded."""


class MissingCommandError(InjectorException):
    """A targeted container does not define a command to wrap."""

    def __init__(self, container_name: str):
        self.container_name = container_name
        super().__init__(
            f"not attaching OP to the container {container_name}: "
            "the podspec does not define a command"
        )


class EncodeError(InjectorException):
    """The admission response could not be serialized."""
