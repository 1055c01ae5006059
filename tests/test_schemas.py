"""Response schemas built from ORM rows."""
import warnings

from pulseconnect.schemas.donor import DonorPublic, DonorResponse, DonorSearchResult


def test_donor_schemas_read_orm_attributes(make_donor):
    donor = make_donor(latitude=12.5, longitude=77.25)

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        public = DonorPublic.model_validate(donor)
        private = DonorResponse.model_validate(donor)

    assert public.id == donor.id
    assert public.latitude == 12.5
    assert private.credits == 0
    assert DonorSearchResult.model_config["from_attributes"] is True
