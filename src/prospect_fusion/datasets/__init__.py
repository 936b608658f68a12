from prospect_fusion.datasets.profiles import CHANNEL_SCHEMAS, PROSPECT_SCHEMA
from prospect_fusion.datasets.synthetic import ProspectDatasetGenerator

__all__ = ["CHANNEL_SCHEMAS", "PROSPECT_SCHEMA", "ProspectDatasetGenerator"]
