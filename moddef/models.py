from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field

STATUS_OK = "ok"
STATUS_ERROR = "error"


class ErrorKind(str, Enum):
    """The three ways a registry call can fail."""

    UNRESOLVED_DEPENDENCY = "unresolved_dependency"
    DUPLICATE_REGISTRATION = "duplicate_registration"
    UNBUILT_MODULE = "unbuilt_module"
    INVALID_MODULE_ID = "invalid_module_id"


class Success(BaseModel):
    """Successful ``try_define``/``try_require`` outcome."""

    status: Literal["ok"] = STATUS_OK
    value: Any = None

    @property
    def ok(self) -> bool:
        return True


class Failure(BaseModel):
    """Failed ``try_define``/``try_require`` outcome.

    ``module_id`` names the module that triggered the failure: the missing
    dependency, the duplicated id, or the id that has not been built yet.
    """

    status: Literal["error"] = STATUS_ERROR
    kind: ErrorKind
    module_id: Optional[str] = None
    message: str

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success, Failure]


class ModuleSummary(BaseModel):
    """Serializable view of one registry record, without its exports."""

    id: str
    dependency_ids: List[str] = Field(default_factory=list)


class RegistrySnapshot(BaseModel):
    """Registered modules in registration order."""

    modules: List[ModuleSummary] = Field(default_factory=list)

    def ids(self) -> List[str]:
        """Return the registered ids in registration order.

        Returns:
            List[str]: Module identifiers.
        """
        return [module.id for module in self.modules]
