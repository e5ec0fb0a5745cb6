import pytest

from heritage_sites import config
from heritage_sites.config import AnalysisConfig


def test_defaults():
    analysis_config = AnalysisConfig().validate()
    assert analysis_config.min_area_hectares == 100
    assert analysis_config.min_group_size == 3
    assert analysis_config.category_filter == "Cultural"
    assert analysis_config.urban_class_codes == (19,)
    assert analysis_config.wdpa_class_codes is None
    assert analysis_config.crs is None


@pytest.mark.parametrize("kwargs", [
    {'min_area_hectares': -1},
    {'min_area_hectares': None},
    {'min_area_hectares': float('nan')},
    {'min_area_hectares': float('inf')},
    {'min_group_size': -2},
    {'category_filter': ''},
    {'urban_class_codes': ()},
    {'wdpa_class_codes': ()},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        AnalysisConfig(**kwargs).validate()


def test_with_crs_returns_copy():
    base = AnalysisConfig()
    bound = base.with_crs('EPSG:3857')
    assert bound.crs == 'EPSG:3857'
    assert base.crs is None
    assert bound.min_area_hectares == base.min_area_hectares


def test_get_scope():
    assert config.get_scope('global')['region'] is None
    assert config.get_scope('italy')['region'] == 'Italy'
    with pytest.raises(ValueError, match="Invalid scope"):
        config.get_scope('mars')


def test_module_constants_are_valid():
    config.validate_config()
