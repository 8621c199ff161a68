from .one_compartment import absorption_concentration, iv_bolus_concentration
from .response import hill

__all__ = ["absorption_concentration", "iv_bolus_concentration", "hill"]
