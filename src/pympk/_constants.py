"""Internal constants shared across the library."""

SIMS_BASE_URLS: tuple[str, ...] = (
    "https://api.dla.sims.pl",
    "https://api.dlugoleka.sims.pl",
    "https://api.dlugoleka.mp.sims.pl",
)

MPK_BASE_URL = "https://impk.mpk.wroc.pl:8088/mobile"
# Public credentials shipped with the official Android app.
MPK_USERNAME = "android-mpk"
MPK_PASSWORD = "g5crehAfUCh4Wust"

USER_AGENT = "pympk (+https://github.com/pympk/pympk)"

# MPK expects and returns naive "SQL style" datetimes in local Wrocław time.
SQL_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TIME_ZONE = "Europe/Warsaw"
