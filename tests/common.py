# coding: utf-8
""" Reusable test elements """
# stdlib imports
from datetime import datetime, timedelta
from decimal import Decimal


# 3rd party imports
from sqlalchemy import create_engine


# local imports
from costbasis.config import CONFIG
from costbasis import database
from costbasis.basis import Lot


DB_URI = CONFIG.test_db_uri

#  Expected values below assume the default books, whatever the user's config file says.
CONFIG.read_dict({"books": {"longterm_days": "365"}, "report": {"decimal_places": "2"}})

#  Fixed as-of moment so that holding periods don't drift with the wall clock.
ASOF = datetime(2024, 6, 1, 12, 0)


def make_lot(daysago, shares, priceusd, fxrate="0.80", uniqueid=None, asof=ASOF):
    """Lot bought `daysago` calendar days before `asof`; numbers given as str/int.
    """
    return Lot(
        datetime=asof - timedelta(days=daysago),
        shares=Decimal(shares),
        priceusd=Decimal(priceusd),
        fxrate=Decimal(fxrate),
        uniqueid=uniqueid,
    )


class DatabaseMixin(object):
    """ Mixin providing a fresh, empty database for every test method """

    def setUp(self):
        """ Called multiple times, before every test method """
        self.engine = create_engine(DB_URI)
        database.Base.metadata.create_all(bind=self.engine)
        self.session = database.Session(bind=self.engine)

    def tearDown(self):
        """ Called multiple times, after every test method """
        self.session.close()
        database.Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()
