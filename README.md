# telemetry-core

Framework-independent pieces of a multi-tenant telemetry HTTP service:
configuration loading, request parsing and validation, pagination, geofence
and automation helpers, and a client for the device service.

## Modules

- `telemetry_core.config`: `load_config(config_path="configs/config.yaml",
  env_file=".env")` reads a YAML file (a missing file is tolerated), loads a
  dotenv file, and builds a `Config` made of `ServerConfig`, `AmqpConfig`,
  `OrgEventsConfig` and `DbConfig`. Environment variables named
  `SECTION_KEY` (for example `SERVER_API_PORT` or `DB_BATCH_SIZE`) override
  values from the file. `validate_config()` checks the values, fills in a
  30-second shutdown timeout when none is set, and raises `ConfigError` when a
  value is invalid. `default_db()` returns default database settings.
  `parse_duration()` turns strings such as `"1s"`, `"250ms"` or `"1h30m"`
  into seconds; plain numbers are read as nanoseconds.
- `telemetry_core.event_rules`: `load_event_rules_config(path)` reads an
  `EventRulesConfig` from one YAML file; `load_event_rules_from_dir(directory)`
  reads one `DeviceModelRules` from each `.yaml`/`.yml` file in a directory,
  logging and skipping files that fail. Files must lie under
  `configs/event_rules` relative to the working directory, which
  `is_path_allowed()` checks. Errors raise `EventRulesError`.
- `telemetry_core.http_request`: `RequestInfo` holds the host, headers,
  scheme, path and query of a request. `resolve_org()` returns the
  `X-Organization` header or else the first label of the host name.
  `resolve_space_slug()` returns the `X-Space` header or raises
  `MissingSpaceError`. `parse_display_types()` splits a comma-separated
  filter and drops blank items.
- `telemetry_core.pagination`: `parse_pagination()` reads `limit` (default 20)
  and `offset` from a query into a `Pagination`; `paginate()` returns the
  `next` and `previous` URLs; `slice_page()` gives the page's start and end
  indexes; `build_base_url()` and `extra_params()` take the base URL and the
  other query parameters from a `RequestInfo`. `PaginatedResponse.to_dict()`
  gives the response body.
- `telemetry_core.device_service`: `DeviceServiceClient.get_device_space()`
  calls `GET {base_url}/device-spaces/{device_id}/internal` with
  `X-Organization` and `X-Space` headers and returns a `DeviceSpaceInfo`, or
  `None` on 404 or when the body holds none. The base URL defaults to the
  `DEVICE_SERVICE_BASE_URL` environment variable, then `http://device/api`.
  Failures raise `DeviceServiceError`.
- `telemetry_core.widget`: `parse_widget_request(entity_id, query)` checks a
  dashboard widget query against `DisplayType` and returns a
  `WidgetDataRequest`; chart, histogram and table need `start_time` and
  `end_time`. Errors raise `WidgetRequestError`.
- `telemetry_core.location`: `parse_timestamp()` reads RFC 3339 timestamps;
  `LocationHistoryRequest.validate()` checks the required fields and fills a
  missing end time with the current time; `LocationResponse.to_dict()`
  formats one position. Errors raise `LocationRequestError`.
- `telemetry_core.geofence_geometry`: `features_to_multipolygon()` joins
  GeoJSON Polygon geometries into one MultiPolygon, `parse_bbox()` reads
  `west,south,east,north`, and `evaluate_geofence_test()` judges
  `GeofenceCheck` results against a safe or danger zone. Errors raise
  `GeofenceError`.
- `telemetry_core.geofence_rules`: `ensure_distance_condition()` adds a
  `distance_from_geofence_km` condition to a rule definition (`gte: 0` for
  safe zones, `lte: 0` otherwise); `remove_zero_distance()` drops such
  conditions whose thresholds are all zero.
- `telemetry_core.automation_requests`: `validate_automation_request()` and
  `validate_action_request()` decode and check request bodies into
  `AutomationRequest` and `ActionRequest`; `parse_status_list()` and
  `parse_device_filter()` read query filters. Errors raise `ValidationError`.
- `telemetry_core.automation_output`: `automation_to_dict()`,
  `action_to_dict()` and `with_device_space()` build response mappings from
  `Automation` and `Action` records.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from telemetry_core.http_request import RequestInfo, resolve_org
from telemetry_core.pagination import Pagination, paginate

request = RequestInfo(host="acme.example.com", headers={"X-Space": "main"})
assert resolve_org(request) == "acme"

next_url, previous_url = paginate(45, Pagination(limit=20, offset=20),
                                  "https://acme.example.com/v1/entities", {})
# next_url == "https://acme.example.com/v1/entities?limit=20&offset=40"
# previous_url == "https://acme.example.com/v1/entities?limit=20&offset=0"
```

## What this package does not do

The package provides no HTTP server, routes or command-line program, keeps no
storage of its own (no database access for entities, events, geofences or
automations), and does not consume or publish message-queue tasks. It supplies
the parsing, validation and shaping that such a service uses around those
parts.