"""Typed view of the OpenWeatherMap current-weather payload.

Only the fields the cache needs are declared; everything else the provider
sends is ignored. A payload missing any declared field is rejected as a whole.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt


class ProviderSys(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sunrise: StrictInt
    sunset: StrictInt


class ProviderMain(BaseModel):
    model_config = ConfigDict(extra="ignore")

    temp: StrictFloat | StrictInt
    humidity: StrictFloat | StrictInt


class ProviderPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sys: ProviderSys
    main: ProviderMain
