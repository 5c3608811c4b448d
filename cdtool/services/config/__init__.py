"""Configuration package (Facade).

Re-exports the public config types so callers import from one stable path:

	from cdtool.services.config import TablestoreConfig, OssConfig

The environment-config synthesizer lives here too, since every controller reads
the flat config it produces.
"""

from cdtool.services.config.domain_config import DomainConfig
from cdtool.services.config.env_config import (
	AUTO,
	OTHER_DEFAULT_CONFIG,
	OTS_DEFAULT_CONFIG,
	Credentials,
	is_auto,
	service_name_from_props,
	synthesize_env_config,
)
from cdtool.services.config.oss_config import OssConfig, auto_bucket_name
from cdtool.services.config.tablestore_config import OtsAccess, TablestoreConfig

__all__ = [
	"AUTO",
	"OTHER_DEFAULT_CONFIG",
	"OTS_DEFAULT_CONFIG",
	"Credentials",
	"DomainConfig",
	"OssConfig",
	"OtsAccess",
	"TablestoreConfig",
	"auto_bucket_name",
	"is_auto",
	"service_name_from_props",
	"synthesize_env_config",
]
