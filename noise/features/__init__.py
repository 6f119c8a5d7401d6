from noise.features.home_feed import HomeFeedViewModel
from noise.features.login import LoginViewModel
from noise.features.make_live import MakeNoiseLiveViewModel
from noise.features.settings import SettingsViewModel

__all__ = [
    "HomeFeedViewModel",
    "LoginViewModel",
    "MakeNoiseLiveViewModel",
    "SettingsViewModel",
]
