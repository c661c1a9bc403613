from .model_params import FIXED_PARAM_PRESETS

__all__ = ['FIXED_PARAM_PRESETS']
