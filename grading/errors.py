"""Error taxonomy for block answer validation."""


class BlockValidationError(ValueError):
    """Base class for problems with the content document or the submission."""


class BlockNotFoundError(BlockValidationError):
    """No block of the requested kind and id could be resolved from the content."""

    def __init__(self, kind: str, block_id: str):
        self.kind = kind
        self.block_id = block_id
        super().__init__(f"{kind} block with id '{block_id}' was not found")


class EmptySubmissionError(BlockValidationError):
    """The submitted answer did not contain anything that could be evaluated."""

    def __init__(self, kind: str, detail: str = ""):
        self.kind = kind
        message = f"Submitted answer for {kind} block is empty"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnsupportedKindError(LookupError):
    """No evaluator is registered for the requested exercise kind.

    Deliberately not a BlockValidationError: callers must report this
    separately from bad input.
    """

    def __init__(self, tag: object):
        self.tag = tag
        super().__init__(f"Answer validation not supported for kind '{tag}'")
