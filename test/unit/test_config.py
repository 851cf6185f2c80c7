import pytest
from tracer.config import make_config, parse_resolution, parse_flag, default_config, preview_config
from tracer.errors import InvalidArgument, UnsupportedResolution


@pytest.mark.unittest
def test_defaults():
    cfg = make_config()
    assert dict(cfg) == default_config


@pytest.mark.unittest
def test_layers_and_overrides():
    cfg = make_config(preview_config, spp=2)
    assert cfg['spp'] == 2
    assert cfg['width'] == preview_config['width']
    assert cfg['accelerator'] == default_config['accelerator']


@pytest.mark.unittest
@pytest.mark.parametrize('overrides', [
    {'spp': 0},
    {'accelerator': 'kdtree'},
    {'partition': 'spiral'},
    {'parallel': 'yes'},
    {'workers': 0},
    {'max_depth': -1},
    {'split_method': 'middle'},
    {'grid_density': 0},
    {'seed': 2 ** 63},
    {'seed': -2 ** 63 - 1},
    {'seed': 1.5},
    {'spp': 2 ** 64},
    {'colour': 'red'},
])
def test_invalid(overrides):
    with pytest.raises(InvalidArgument):
        make_config(**overrides)


@pytest.mark.unittest
def test_invalid_resolution():
    with pytest.raises(UnsupportedResolution):
        make_config(width=0)


@pytest.mark.unittest
def test_parse_resolution():
    assert parse_resolution('640x480') == (640, 480)
    assert parse_resolution('1X1') == (1, 1)
    for bad in ['640', '640x', 'x480', '0x10', '10x-1', '1x2x3', 'axb']:
        with pytest.raises(UnsupportedResolution):
            parse_resolution(bad)


@pytest.mark.unittest
def test_parse_flag():
    assert parse_flag('yes') is True
    assert parse_flag('no') is False
    with pytest.raises(InvalidArgument):
        parse_flag('maybe')


@pytest.mark.unittest
def test_seed_range():
    assert make_config(seed=2 ** 63 - 1)['seed'] == 2 ** 63 - 1
    assert make_config(seed=-2 ** 63)['seed'] == -2 ** 63
