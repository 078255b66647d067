"""
Listing lifecycle: listed -> matched -> picked_up, matched -> listed on decline.
"""

from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from agriloop import listings, models, schemas
from agriloop.errors import NotFoundError, TransientStoreError

LS = models.ListingStatus
MS = models.MatchStatus


@pytest.fixture
def listing(db, seller):
    data = schemas.ListingCreate(waste_type="straw", quantity_kg=500, location="Ludhiana", expected_price=2500)
    return listings.create_listing(db, seller.id, data)


def test_new_listing_is_listed(listing, seller):
    assert listing.status == LS.listed
    assert listing.seller_id == seller.id


def test_request_match(db, listing, buyer):
    updated, match = listings.request_match(db, buyer.id, listing.id)
    assert updated.status == LS.matched
    assert match.status == MS.pending
    assert match.buyer_id == buyer.id
    assert listings.list_available_listings(db) == []


def test_matched_listing_cannot_be_requested_again(db, listing, buyer, make_user):
    listings.request_match(db, buyer.id, listing.id)
    with pytest.raises(NotFoundError):
        listings.request_match(db, make_user(models.RoleEnum.buyer).id, listing.id)


def test_accept_match(db, listing, buyer, seller):
    listings.request_match(db, buyer.id, listing.id)
    updated, match = listings.accept_match(db, seller.id, listing.id)
    assert updated.status == LS.picked_up
    assert match.status == MS.accepted


def test_decline_match_relists(db, listing, buyer, seller):
    listings.request_match(db, buyer.id, listing.id)
    updated, match = listings.decline_match(db, seller.id, listing.id)
    assert updated.status == LS.listed
    assert match.status == MS.declined
    assert [x.id for x in listings.list_available_listings(db)] == [listing.id]


def test_accept_then_decline_is_not_possible(db, listing, buyer, seller):
    listings.request_match(db, buyer.id, listing.id)
    listings.accept_match(db, seller.id, listing.id)
    with pytest.raises(NotFoundError):
        listings.decline_match(db, seller.id, listing.id)
    db.refresh(listing)
    assert listing.status == LS.picked_up


def test_decline_then_accept_is_not_possible(db, listing, buyer, seller):
    listings.request_match(db, buyer.id, listing.id)
    listings.decline_match(db, seller.id, listing.id)
    with pytest.raises(NotFoundError):
        listings.accept_match(db, seller.id, listing.id)
    db.refresh(listing)
    assert listing.status == LS.listed


def test_accept_without_pending_match(db, listing, seller):
    with pytest.raises(NotFoundError):
        listings.accept_match(db, seller.id, listing.id)
    db.refresh(listing)
    assert listing.status == LS.listed


def test_accept_someone_elses_listing(db, listing, buyer, make_user):
    listings.request_match(db, buyer.id, listing.id)
    other = make_user(models.RoleEnum.seller)
    with pytest.raises(NotFoundError):
        listings.accept_match(db, other.id, listing.id)
    db.refresh(listing)
    assert listing.status == LS.matched


def test_failed_commit_rolls_back_both_rows(db, listing, buyer, seller):
    _, match = listings.request_match(db, buyer.id, listing.id)
    with mock.patch.object(db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))):
        with pytest.raises(TransientStoreError):
            listings.accept_match(db, seller.id, listing.id)
    db.expire_all()
    assert db.get(models.Listing, listing.id).status == LS.matched
    assert db.get(models.Match, match.id).status == MS.pending


def test_second_request_after_decline_is_the_one_resolved(db, listing, buyer, seller, make_user):
    listings.request_match(db, buyer.id, listing.id)
    listings.decline_match(db, seller.id, listing.id)
    other = make_user(models.RoleEnum.buyer)
    _, second = listings.request_match(db, other.id, listing.id)
    _, resolved = listings.accept_match(db, seller.id, listing.id)
    assert resolved.id == second.id
    assert resolved.buyer_id == other.id


def test_list_seller_listings(db, listing, seller, make_user):
    other = make_user(models.RoleEnum.seller)
    assert [x.id for x in listings.list_seller_listings(db, seller.id)] == [listing.id]
    assert listings.list_seller_listings(db, other.id) == []
