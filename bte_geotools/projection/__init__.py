# -*- coding: utf-8 -*-
"""BuildTheEarth projection engine."""

from bte_geotools.projection.dymaxion import BTEDymaxionProjection
from bte_geotools.projection.dymaxion import ConformalDymaxionProjection
from bte_geotools.projection.dymaxion import DymaxionProjection
from bte_geotools.projection.field import InvertableVectorField
from bte_geotools.projection.field import build_conformal_field
from bte_geotools.projection.field import load_vector_field
from bte_geotools.projection.minecraft import MinecraftProjection
from bte_geotools.projection.minecraft import asean_bte
from bte_geotools.projection.minecraft import bte
from bte_geotools.projection.minecraft import custom_base
from bte_geotools.projection.minecraft import custom_offset

__all__ = [
    "BTEDymaxionProjection",
    "ConformalDymaxionProjection",
    "DymaxionProjection",
    "InvertableVectorField",
    "MinecraftProjection",
    "asean_bte",
    "bte",
    "build_conformal_field",
    "custom_base",
    "custom_offset",
    "load_vector_field",
]
