"""FlowJournal trading journal backend."""

__version__ = "0.1.0"
