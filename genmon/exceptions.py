"""Custom exception hierarchy for genmon."""


class GenmonError(Exception):
    """Base for all genmon errors."""


class AgentNotFoundError(GenmonError):
    """No agent with the given ID exists."""


class ProposalNotFoundError(GenmonError):
    """No launch proposal with the given ID exists."""


class AgentStateError(GenmonError):
    """Invalid agent state change, e.g. reviving a dead agent."""


class ProposalAlreadyExecutedError(GenmonError):
    """A launch proposal may only be executed once."""


class BreedingError(GenmonError):
    """Two agents could not be bred."""
