import json

import pytest

from src.records import IncidentRecord, LaneNetwork, RecordStore
from src.utils.attribute_taxonomy import Severity

MONTREAL = (-73.561668, 45.508888)


def make_record(
    id=1,
    position=MONTREAL,
    severity=Severity.NO_INJURY,
    weather_label='Clear',
    lighting_label='Daylight',
    on_bike_lane=False,
):
    return IncidentRecord(
        id=id,
        position=position,
        severity=severity,
        weather_label=weather_label,
        lighting_label=lighting_label,
        on_bike_lane=on_bike_lane,
    )


@pytest.fixture
def sample_records():
    # 2 Injury, 3 NoInjury, 1 FatalOrHospitalization
    return [
        make_record(1, (-73.5600, 45.5000), Severity.INJURY, 'Clear', 'Daylight', True),
        make_record(2, (-73.5601, 45.5001), Severity.NO_INJURY, 'Rain', 'Night (lit)', False),
        make_record(3, (-73.6000, 45.5300), Severity.NO_INJURY, 'Clear', 'Daylight', False),
        make_record(4, (-73.5602, 45.5002), Severity.FATAL_OR_HOSPITALIZATION, 'Snow', 'Night (unlit)', True),
        make_record(5, (-73.6500, 45.4800), Severity.INJURY, 'Undefined', 'Daylight', False),
        make_record(6, (-73.5603, 45.5003), Severity.NO_INJURY, 'Other', 'Semi-obscure', True),
    ]


@pytest.fixture
def sample_store(sample_records):
    return RecordStore(sample_records)


@pytest.fixture
def lane_network():
    return LaneNetwork({
        'type': 'FeatureCollection',
        'features': [
            {'type': 'Feature', 'properties': {'ID_CYCL': 1},
             'geometry': {'type': 'LineString', 'coordinates': [[-73.56, 45.50], [-73.57, 45.51]]}},
        ],
    })


def _feature(lon, lat, **props):
    return {'type': 'Feature', 'properties': props, 'geometry': {'type': 'Point', 'coordinates': [lon, lat]}}


@pytest.fixture
def accidents_geojson():
    return {
        'type': 'FeatureCollection',
        'features': [
            _feature(-73.56, 45.50, NO_SEQ_COLL='SPVM _ 2012 _ 1', ACCIDENT_TYPE='Injury', CD_COND_METEO=11, CD_ECLRM=1, ON_BIKELANE=True),
            _feature(-73.57, 45.51, NO_SEQ_COLL='SPVM _ 2012 _ 2', ACCIDENT_TYPE='Fatal/Hospitalization', CD_COND_METEO='14', CD_ECLRM='3', ON_BIKELANE=False),
            _feature(-73.58, 45.52, NO_SEQ_COLL='SPVM _ 2012 _ 3', ACCIDENT_TYPE=None, CD_COND_METEO=42, CD_ECLRM=None, ON_BIKELANE=0),
            # no usable position
            {'type': 'Feature', 'properties': {'NO_SEQ_COLL': 'bad'}, 'geometry': None},
            _feature(200.0, 95.0, NO_SEQ_COLL='out of range'),
        ],
    }


@pytest.fixture
def data_files(tmp_path, accidents_geojson, lane_network):
    accidents = tmp_path / 'bikes.geojson'
    lanes = tmp_path / 'reseau_cyclable.json'
    accidents.write_text(json.dumps(accidents_geojson), encoding='utf-8')
    lanes.write_text(json.dumps(dict(lane_network.geojson)), encoding='utf-8')
    return accidents, lanes
