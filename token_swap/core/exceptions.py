# token_swap/core/exceptions.py

class TokenSwapError(Exception):
    """Base class for custom exceptions in this package."""
    pass


class CodecError(TokenSwapError):
    """For values that cannot be carried by a fixed-width field."""
    pass


class ValueTooLargeError(CodecError):
    """Integer needs more than 8 bytes of magnitude."""
    pass


class NegativeValueError(CodecError):
    """Unsigned fields cannot hold negative values."""
    pass


class InvalidValueError(CodecError):
    """Input cannot be read as a whole number."""
    pass


class InvalidBufferLengthError(CodecError):
    """Decode was given a buffer of the wrong length."""

    def __init__(self, expected: int, actual: int, what: str = "buffer"):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid {what} length: {actual} (expected {expected})")


class LayoutError(TokenSwapError):
    """For account data that does not parse as a token swap."""
    pass


class UninitializedAccountError(LayoutError):
    """Decoded swap account has its initialized flag cleared."""
    pass


class UnknownCurveTypeError(LayoutError):
    """Curve type byte outside the known variants."""

    def __init__(self, value: int):
        self.value = value
        super().__init__(f"Unknown curve type: {value}")


class InstructionBuildError(TokenSwapError):
    """For errors during instruction construction."""
    pass


class MissingRequiredAccountError(InstructionBuildError):
    """A required account was not supplied to an instruction builder."""

    def __init__(self, role: str, instruction: str = ""):
        self.role = role
        self.instruction = instruction
        where = f" for {instruction}" if instruction else ""
        super().__init__(f"Missing required account '{role}'{where}")


class UnknownInstructionError(InstructionBuildError):
    """Opcode is not one of the swap program's instructions."""
    pass


class AccountNotFoundError(TokenSwapError):
    """Account does not exist on chain."""
    pass


class InvalidAccountOwnerError(TokenSwapError):
    """Account exists but is owned by a different program."""
    pass


class SendTransactionError(TokenSwapError):
    """For errors during sending or confirming a transaction."""
    pass
