"""
Settings for database connections, lot classification and report formatting,
read from an INI file in the user's config directory.
"""
import os
import configparser

from sqlalchemy.engine import URL


CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".config", "costbasis")
CONFIG_PATH = os.path.join(CONFIG_DIR, "costbasis.cfg")


class CostbasisConfig(configparser.ConfigParser):
    def make_default(self):
        self["db"] = {
            "dialect": "postgresql",
            "driver": "psycopg2",
            "username": "",
            "password": "T0PS3CR3T",
            "host": "localhost",
            "port": "5432",
            "database": "costbasis",
        }
        self["test"] = {"dialect": "sqlite"}
        #  Holding days at which a lot turns long-term (inclusive).
        self["books"] = {"longterm_days": "365"}
        self["report"] = {"decimal_places": "2"}

    @property
    def db_uri(self):
        return self._make_db_uri(self["db"])

    @property
    def test_db_uri(self):
        return self._make_db_uri(self["test"])

    @property
    def longterm_days(self) -> int:
        return self.getint("books", "longterm_days", fallback=365)

    @property
    def decimal_places(self) -> int:
        return self.getint("report", "decimal_places", fallback=2)

    def _make_db_uri(self, section):
        drivername = section["dialect"]
        if section.get("driver"):
            drivername += "+" + section["driver"]

        # Password is meaningless without a username.
        username = section.get("username") or None
        password = (section.get("password") or None) if username else None

        port = section.get("port") if section.get("host") else None

        url = URL.create(
            drivername,
            username=username,
            password=password,
            host=section.get("host") or None,
            port=int(port) if port else None,
            database=section.get("database") or None,
        )
        return url.render_as_string(hide_password=False)


CONFIG = CostbasisConfig()


# If no config exists, generate & write defaults
if os.path.exists(CONFIG_PATH):
    CONFIG.read(CONFIG_PATH)
else:
    CONFIG.make_default()
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_PATH, "w") as configfile:
        CONFIG.write(configfile)
