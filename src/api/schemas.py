from typing import Literal

from pydantic import BaseModel

# --- Shared Types ---
RangeSelector = Literal["7d", "30d", "custom"]
EventName = Literal["page_view", "link_click"]


# --- Ingestion ---
class TrackResponse(BaseModel):
    ok: bool = True
    deduped: bool | None = None


# --- Auth ---
class LoginResponse(BaseModel):
    ok: bool
    token: str | None = None
    error: str | None = None


class VerifyResponse(BaseModel):
    authenticated: bool


class OkResponse(BaseModel):
    ok: bool = True


# --- Summary Sections ---
class TotalsModel(BaseModel):
    pageviews: int = 0
    clicks: int = 0
    uniques: int = 0
    ctr: float = 0.0


class LinkRow(BaseModel):
    link_id: str
    label: str | None = None
    clicks: int = 0
    uniques: int = 0


class ReferrerRow(BaseModel):
    referrer: str
    pageviews: int = 0


class CountryRow(BaseModel):
    country: str
    pageviews: int = 0
    clicks: int = 0
    uniques: int = 0


class LocationRow(BaseModel):
    latitude: float
    longitude: float
    city: str | None = None
    country: str | None = None
    pageviews: int = 0
    uniques: int = 0


class DeviceRow(BaseModel):
    device: str
    pageviews: int = 0
    uniques: int = 0


class OSRow(BaseModel):
    os: str
    pageviews: int = 0
    uniques: int = 0


class BrowserRow(BaseModel):
    browser: str
    pageviews: int = 0
    uniques: int = 0


class TimeseriesRow(BaseModel):
    day: str  # YYYY-MM-DD, UTC
    pageviews: int = 0
    clicks: int = 0


class PeakHourRow(BaseModel):
    hour: int
    day_of_week: int  # 0 = Sunday
    pageviews: int = 0
    clicks: int = 0


class UTMCampaignRow(BaseModel):
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    pageviews: int = 0
    clicks: int = 0
    uniques: int = 0


class RecentActivityRow(BaseModel):
    event_name: EventName
    occurred_at: int
    page_path: str
    link_id: str | None = None
    label: str | None = None
    country: str | None = None
    city: str | None = None
    device: str | None = None
    browser: str | None = None
    referrer: str | None = None


# --- Query Responses ---
class SummaryResponse(BaseModel):
    range: RangeSelector
    start_ms: int
    end_ms: int
    totals: TotalsModel
    top_links: list[LinkRow] = []
    top_referrers: list[ReferrerRow] = []
    top_countries: list[CountryRow] = []
    locations: list[LocationRow] = []
    devices: list[DeviceRow] = []
    operating_systems: list[OSRow] = []
    browsers: list[BrowserRow] = []
    timeseries: list[TimeseriesRow] = []
    peak_hours: list[PeakHourRow] = []
    utm_campaigns: list[UTMCampaignRow] = []
    recent_activity: list[RecentActivityRow] = []


class LinksResponse(BaseModel):
    range: RangeSelector
    start_ms: int
    end_ms: int
    links: list[LinkRow] = []
