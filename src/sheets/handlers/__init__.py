"""
Built-in sheet formats.
"""

from typing import Tuple

from ..convertor import Handler, MusicConvertor
from . import fengxu_genshin_2, piano_wizard_yp, sky_studio_abc, sky_studio_json
from .fengxu_genshin_2 import FENGXU_GENSHIN_2_LABEL
from .piano_wizard_yp import PIANO_WIZARD_YP_LABEL
from .sky_studio_abc import SKY_STUDIO_ABC_LABEL
from .sky_studio_json import SKY_STUDIO_JSON_LABEL

HANDLERS: Tuple[Handler, ...] = (
    sky_studio_json.handler,
    sky_studio_abc.handler,
    piano_wizard_yp.handler,
    fengxu_genshin_2.handler,
)


def default_convertor() -> MusicConvertor:
    """Create a convertor with every built-in format registered."""
    return MusicConvertor(*HANDLERS)


__all__ = [
    'HANDLERS',
    'default_convertor',
    'FENGXU_GENSHIN_2_LABEL',
    'PIANO_WIZARD_YP_LABEL',
    'SKY_STUDIO_ABC_LABEL',
    'SKY_STUDIO_JSON_LABEL',
]
