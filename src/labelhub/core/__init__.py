"""labelhub core library - models, storage, scoring and services."""
from . import config
from . import exceptions
from . import models
from . import schemas
from . import scoring
from . import services
from . import storage

__all__ = [
    "config",
    "exceptions",
    "models",
    "schemas",
    "scoring",
    "services",
    "storage",
]
