from astropy.time import Time

J2000_JD = 2451545.0
SECONDS_PER_DAY = 86400.0


def jd_to_seconds_since_j2000(jd: float) -> float:
    return (jd - J2000_JD) * SECONDS_PER_DAY


def seconds_since_j2000_to_jd(seconds: float) -> float:
    return J2000_JD + seconds / SECONDS_PER_DAY


def utc_to_tdb_seconds(utc_time) -> float:
    """
    Convert a UTC epoch (ISO string, datetime or astropy Time) to TDB seconds
    since J2000.
    """
    if isinstance(utc_time, str):
        if utc_time.endswith('Z'):
            utc_time = utc_time[:-1]
        elif utc_time.endswith('+00:00'):
            utc_time = utc_time[:-len('+00:00')]
        utc_time = utc_time.replace('T', ' ')

    if isinstance(utc_time, Time):
        t_utc = utc_time.utc
    elif isinstance(utc_time, str):
        t_utc = Time(utc_time, format='iso', scale='utc')
    else:
        t_utc = Time(utc_time, scale='utc')

    t_tdb = t_utc.tt.tdb
    # Two-part JD keeps sub-microsecond resolution.
    return ((t_tdb.jd1 - J2000_JD) + t_tdb.jd2) * SECONDS_PER_DAY


def tdb_seconds_to_utc(seconds: float) -> str:
    t_tdb = Time(J2000_JD, seconds / SECONDS_PER_DAY, format='jd', scale='tdb')
    return t_tdb.utc.iso
