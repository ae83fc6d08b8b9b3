"""
Donor leaderboard.

Donor users are joined with the supplies they donated (``users.email`` ==
``supplies.donatedBy``), folded into one row per donor with the summed
``amount``, ranked by that total and projected to a public view.

A donor with no matching supply is dropped by the unwind stage rather than
listed with a zero total. Only amounts the store classifies as numbers are
summed; missing, null, string and boolean amounts count as 0. Equal totals
have no defined order.
"""

from typing import List

from pymongo.database import Database

from database import SUPPLIES, USERS, serialize_document

DONOR_ROLE = "donor"

MATCH_DONORS = {"$match": {"role": DONOR_ROLE}}

LOOKUP_SUPPLIES = {
    "$lookup": {
        "from": SUPPLIES,
        "localField": "email",
        "foreignField": "donatedBy",
        "as": "supplies",
    }
}

UNWIND_SUPPLIES = {"$unwind": "$supplies"}

GROUP_BY_DONOR = {
    "$group": {
        "_id": "$_id",
        "name": {"$first": "$name"},
        "email": {"$first": "$email"},
        "password": {"$first": "$password"},
        "role": {"$first": "$role"},
        "image": {"$first": "$image"},
        "designation": {"$first": "$designation"},
        "totalDonation": {
            "$sum": {
                "$cond": [{"$isNumber": "$supplies.amount"}, "$supplies.amount", 0],
            }
        },
        "supplies": {"$push": "$supplies"},
    }
}

SORT_BY_TOTAL = {"$sort": {"totalDonation": -1}}

PUBLIC_PROJECTION = {
    "$project": {
        "_id": 1,
        "name": 1,
        "designation": 1,
        "image": 1,
        "totalDonation": 1,
    }
}

DONOR_TOTALS_PIPELINE = [MATCH_DONORS, LOOKUP_SUPPLIES, UNWIND_SUPPLIES, GROUP_BY_DONOR]
LEADERBOARD_PIPELINE = DONOR_TOTALS_PIPELINE + [SORT_BY_TOTAL, PUBLIC_PROJECTION]


def donor_totals(db: Database) -> List[dict]:
    """Un-projected fold rows, one per donor with at least one supply."""
    return [serialize_document(doc) for doc in db[USERS].aggregate(DONOR_TOTALS_PIPELINE)]


def leaderboard(db: Database) -> List[dict]:
    """Public leaderboard entries ordered by ``totalDonation`` descending."""
    entries = []
    for doc in db[USERS].aggregate(LEADERBOARD_PIPELINE):
        if doc.get("designation") is None:
            doc.pop("designation", None)
        entries.append(serialize_document(doc))
    return entries
