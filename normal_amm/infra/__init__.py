"""normal_amm.infra — configuration and logging setup."""

from normal_amm.infra.config import CONFIG_FILE as CONFIG_FILE
from normal_amm.infra.config import AnalysisConfig as AnalysisConfig
from normal_amm.infra.config import EconomicConfig as EconomicConfig
from normal_amm.infra.config import Settings as Settings
from normal_amm.infra.config import load_config as load_config
from normal_amm.infra.config import parse_settings as parse_settings
from normal_amm.infra.config import setup_logging as setup_logging
