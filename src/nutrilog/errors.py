"""Error kinds raised at the persistence and inference boundaries."""


class NutrilogError(Exception):
    """Base class for nutrilog errors."""


class LoadError(NutrilogError):
    """Persisted data could not be read or parsed."""


class SaveError(NutrilogError):
    """Persisted data could not be serialized or written."""


class InferenceError(NutrilogError):
    """The external nutrition model failed or returned an unusable payload."""


class BusyError(NutrilogError):
    """A submission was attempted while another one is in flight."""
