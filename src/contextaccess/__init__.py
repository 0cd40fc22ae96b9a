from .config import (
    InheritanceConfig,
    LogLevel,
    MergePreference,
    PreferenceSource,
    load_inheritance_config_from_env,
)
from .exceptions import (
    ConfigurationError,
    ContextAccessError,
    InheritanceCycleError,
    ProviderError,
    StorageError,
    SubjectGraphError,
)
from .inheritance import (
    DEFAULT_MERGE_RULES,
    InMemorySettingsProvider,
    MergeResolver,
    MergeRules,
    RawSettings,
    ResolutionCache,
    ResourceKey,
    ResourceType,
    SettingsProvider,
    Subject,
    SubjectGraph,
    SubjectKind,
    merge_settings,
    overlay_settings,
)
from .logging import (
    AccessLogFormatter,
    ResolutionLoggerAdapter,
    get_resolution_logger,
    safe_preview,
    setup_logging,
)

__all__ = [
    'InheritanceConfig',
    'LogLevel',
    'MergePreference',
    'PreferenceSource',
    'load_inheritance_config_from_env',
    'ConfigurationError',
    'ContextAccessError',
    'InheritanceCycleError',
    'ProviderError',
    'StorageError',
    'SubjectGraphError',
    'DEFAULT_MERGE_RULES',
    'InMemorySettingsProvider',
    'MergeResolver',
    'MergeRules',
    'RawSettings',
    'ResolutionCache',
    'ResourceKey',
    'ResourceType',
    'SettingsProvider',
    'Subject',
    'SubjectGraph',
    'SubjectKind',
    'merge_settings',
    'overlay_settings',
    'AccessLogFormatter',
    'ResolutionLoggerAdapter',
    'get_resolution_logger',
    'safe_preview',
    'setup_logging',
]
