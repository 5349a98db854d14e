# user-facing resolution guidance
DEFINE_FIRST_HINT = "Define it with define() before it is required."
APPEND_ONLY_HINT = "Registrations are append-only; choose a different id."

# error message templates
MSG_DEPENDENCY_NOT_LOADED = "Dependency not fully loaded: '{module_id}'. " + DEFINE_FIRST_HINT
MSG_MODULE_EXISTS = "Module already exists: '{module_id}'. " + APPEND_ONLY_HINT
MSG_MODULE_NOT_BUILT = "Module not yet built: '{module_id}'. " + DEFINE_FIRST_HINT
MSG_INVALID_MODULE_ID = "Invalid module id {module_id!r}: {reason}"

# registry event identifiers recognised by RegistryLogHandler
EVENT_MODULE_REGISTERED = "module_registered"
EVENT_MODULE_BUILT = "module_built"
EVENT_MODULE_REQUIRED = "module_required"
EVENT_DEPENDENCY_SKIPPED = "dependency_skipped"

# environment variables read by RegistrySettings
ENV_LOG_LEVEL = "MODDEF_LOG_LEVEL"
ENV_LOG_FORMAT = "MODDEF_LOG_FORMAT"
ENV_STRICT_IDS = "MODDEF_STRICT_IDS"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# relative prefixes rejected when strict ids are enabled
RELATIVE_ID_PREFIXES = ("./", "../")
