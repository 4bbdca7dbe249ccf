# nebula-sync

Keep several Pi-hole instances in step. `nebula-sync` reads the configuration
of a primary Pi-hole through its web API and pushes it to one or more
replicas: the teleporter archive (gravity database, groups, ad lists, domain
lists, clients, DHCP leases) and the individual config sections (DNS, DHCP,
NTP, resolver, database, misc, debug). It syncs once at start-up and, when a
cron schedule is configured, keeps syncing on that schedule.

## Installation

```
pip install nebula-sync
```

## Usage

All settings come from environment variables, optionally loaded from a
`.env` file:

```
nebula-sync run
nebula-sync run --env-file .env
nebula-sync --version
```

Variables already present in the environment take precedence over those in
the file. The command exits with status 1 if the env file cannot be read, the
configuration is invalid, or the sync fails.

### Targets

| Variable | Meaning |
| --- | --- |
| `PRIMARY` | Primary instance as `URL\|password` |
| `REPLICAS` | Comma separated replicas, each `URL\|password` |
| `PRIMARY_FILE` | File holding the `PRIMARY` value (takes precedence) |
| `REPLICAS_FILE` | File holding the `REPLICAS` value (takes precedence) |

Only the first `|` separates URL from password, so a password may itself
contain `|`.

Example `.env`:

```
PRIMARY=http://ph1.example.com|password
REPLICAS=http://ph2.example.com|password,http://ph3.example.com|password
FULL_SYNC=true
RUN_GRAVITY=true
CRON=0 * * * *
```

### Sync mode

| Variable | Default | Meaning |
| --- | --- | --- |
| `FULL_SYNC` | required | `true` syncs everything, `false` uses the selective settings below |
| `CRON` | unset | Cron schedule; when set, the sync repeats on it after the first run |
| `RUN_GRAVITY` | `false` | Run gravity on primary and replicas after syncing |
| `SYNC_SUCCESS_WEBHOOK_URL` | empty | URL receiving a `POST` after a successful sync |
| `SYNC_FAILURE_WEBHOOK_URL` | empty | URL receiving a `POST` after a failed sync |

`CRON` accepts five fields (minute, hour, day of month, month, day of week,
with ranges, steps, lists and month/day names), the descriptors `@yearly`,
`@annually`, `@monthly`, `@weekly`, `@daily`, `@midnight`, `@hourly`, and
`@every <duration>` (for example `@every 1h30m`). A leading `TZ=<zone>` or
`CRON_TZ=<zone>` sets the time zone of the schedule. A sync that fails during
the schedule is logged and the schedule carries on.

### Selective sync

Teleporter parts, each `true`/`false` (default `false`):
`SYNC_GRAVITY_DHCP_LEASES`, `SYNC_GRAVITY_GROUP`, `SYNC_GRAVITY_AD_LIST`,
`SYNC_GRAVITY_AD_LIST_BY_GROUP`, `SYNC_GRAVITY_DOMAIN_LIST`,
`SYNC_GRAVITY_DOMAIN_LIST_BY_GROUP`, `SYNC_GRAVITY_CLIENT`,
`SYNC_GRAVITY_CLIENT_BY_GROUP`.

Config sections, each `true`/`false` (default `false`):
`SYNC_CONFIG_DNS`, `SYNC_CONFIG_DHCP`, `SYNC_CONFIG_NTP`,
`SYNC_CONFIG_RESOLVER`, `SYNC_CONFIG_DATABASE`, `SYNC_CONFIG_MISC`,
`SYNC_CONFIG_DEBUG`.

Each config section also accepts `<SECTION>_INCLUDE` or `<SECTION>_EXCLUDE`
(for example `SYNC_CONFIG_DNS_INCLUDE=upstreams,reply.host.force4`): a comma
separated list of keys, with dots reaching into nested objects. Only one of
the two may be set per section.

The webserver and files sections are never synced.

### HTTP client

| Variable | Default | Meaning |
| --- | --- | --- |
| `CLIENT_SKIP_TLS_VERIFICATION` | `false` | Accept self-signed certificates |
| `CLIENT_TIMEOUT_SECONDS` | `20` | Request timeout |
| `CLIENT_RETRY_DELAY_SECONDS` | `1` | Fixed delay between retries of replica calls |

Calls to replicas are retried: authentication and session deletion up to 3
times, teleporter uploads, config patches and gravity runs up to 5 times.

### Logging

Debug, info and warning messages go to standard output; errors go to
standard error. Set `NS_DEBUG=true` for debug output, which also shows the
file and line of each message.

## Using it as a library

```python
from nebula_sync.service import Service

service = Service.from_environment()
service.run()
```

`Service.from_environment()` takes an optional mapping to read instead of
`os.environ`. `nebula_sync.config.Config.load()` reads the configuration on
its own, `nebula_sync.client.PiHoleClient` talks to a single Pi-hole API, and
`nebula_sync.sync.Target` runs a full or selective sync of a primary onto its
replicas.

## Development

```
pip install -e ".[test]"
pytest
```