"""Exceptions raised by the question-answering pipeline."""


class RetrievalError(Exception):
    """
    The query could not be embedded, or the index could not be searched.

    Terminal for the turn: the user sees a generic "search failed" message.
    """
    pass
