import pytest

from sdpx import SdpxError, parse_scalability_mode


@pytest.mark.parametrize(
    "mode, spatial, temporal",
    [("L1T3", 1, 3), ("L3T2", 3, 2), ("L3T2_KEY", 3, 2), ("L10T12", 10, 12)],
)
def test_parse_scalability_mode(mode, spatial, temporal):
    assert parse_scalability_mode(mode) == {
        "spatialLayers": spatial,
        "temporalLayers": temporal,
    }


@pytest.mark.parametrize("mode", ["", "S3T3", "L3", "T3L1", "l1t3", None])
def test_parse_invalid_scalability_mode(mode):
    with pytest.raises(SdpxError, match="invalid scalabilityMode"):
        parse_scalability_mode(mode)
