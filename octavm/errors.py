"""Fatal machine conditions.

Every error here halts the run. Nothing in the interpreter retries or
recovers from them.
"""


class MachineError(Exception):
    """Base for conditions that terminate a machine run."""
    pass


class UnknownInstructionError(MachineError):
    def __init__(self, instruction: int):
        self.instruction = instruction
        super().__init__(f"No matching handler for instruction 0x{instruction:04X}")


class StackOverflowError(MachineError):
    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Stack overflow calling 0x{address:03X}")


class StackUnderflowError(MachineError):
    def __init__(self):
        super().__init__("Return with an empty stack")


class MemoryAccessError(MachineError):
    def __init__(self, address: int, action: str = "access"):
        self.address = address
        super().__init__(f"Memory {action} out of range at 0x{address:04X}")


class RomTooLargeError(MachineError, ValueError):
    def __init__(self, size: int, limit: int):
        self.size = size
        super().__init__(f"ROM is {size} bytes, at most {limit} fit in memory")


class MachineHaltedError(MachineError):
    """Raised when a halted machine is asked to do more work."""
    pass
