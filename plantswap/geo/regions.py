"""
Rough US region bands keyed by the leading zip digit.

Used only for the last-resort approximation. Each band is a lat/lng box
loosely covering the states of that zip prefix; points placed inside it
are deterministic but not real locations.
"""
from typing import Dict, Tuple

# leading digit -> (lat_min, lat_max, lng_min, lng_max)
ZIP_REGION_BANDS: Dict[str, Tuple[float, float, float, float]] = {
    "0": (40.5, 47.5, -73.5, -67.0),     # New England, NJ
    "1": (39.7, 45.0, -80.5, -73.5),     # NY, PA, DE
    "2": (32.0, 39.7, -83.7, -75.2),     # DC, MD, VA, WV, NC, SC
    "3": (24.5, 36.7, -91.7, -80.0),     # AL, FL, GA, MS, TN
    "4": (36.5, 48.3, -89.6, -80.5),     # IN, KY, MI, OH
    "5": (40.4, 49.0, -116.0, -86.8),    # IA, MN, MT, ND, SD, WI
    "6": (35.9, 43.0, -104.1, -87.0),    # IL, KS, MO, NE
    "7": (25.8, 37.0, -106.6, -89.0),    # AR, LA, OK, TX
    "8": (31.3, 49.0, -120.0, -102.0),   # AZ, CO, ID, NM, NV, UT, WY
    "9": (32.5, 49.0, -124.5, -114.1),   # CA, OR, WA
}
