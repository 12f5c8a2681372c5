import pytest

from quadvox.config import ViewerConfig, load_config, save_config


def test_defaults():
    c = load_config()
    assert c == ViewerConfig()
    assert c.width == 800 and c.height == 600
    assert c.position == [0.0, 0.0, -5.0]
    assert c.step_x == 2.0 and c.step_y == 3.0
    assert c.aspect == pytest.approx(4.0 / 3.0)
    assert not c.normal_visualization


def test_load_yaml(tmp_path):
    path = tmp_path / 'quadvox.yaml'
    path.write_text('side_length: 2.5\n'
                    'position: [1, 2, -8]\n'
                    'normal_visualization: true\n')
    c = load_config(path)
    assert c.side_length == 2.5
    assert c.position == [1, 2, -8]
    assert c.normal_visualization
    assert c.fov == 45.0


def test_empty_file_is_defaults(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text('')
    assert load_config(path) == ViewerConfig()


def test_not_a_mapping(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text('- 1\n- 2\n')
    with pytest.raises(ValueError):
        load_config(str(path))


def test_unknown_key(tmp_path):
    path = tmp_path / 'typo.yaml'
    path.write_text('sidelength: 2\n')
    with pytest.raises(ValueError, match='sidelength'):
        load_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_config(tmp_path / 'nope.yaml')


@pytest.mark.parametrize('bad', [
    {'width': 0},
    {'fov': 180.0},
    {'near': 10.0, 'far': 1.0},
    {'side_length': -1.0},
    {'interval': 0},
    {'position': [0, 0]},
    {'clear_color': [0.0, 0.0, 2.0, 1.0]},
])
def test_validation(bad):
    with pytest.raises(ValueError):
        ViewerConfig.from_dict(bad)


def test_merged_ignores_none():
    base = ViewerConfig()
    c = base.merged(side_length=3.0, position=None)
    assert c.side_length == 3.0
    assert c.position == base.position
    with pytest.raises(ValueError):
        base.merged(side_length=0.0)


def test_save_then_load(tmp_path):
    path = tmp_path / 'out.yaml'
    c = ViewerConfig(width=1024, height=768, position=[0.0, 1.0, -3.0])
    save_config(c, path)
    assert load_config(path) == c


def test_yaml_syntax_error(tmp_path):
    path = tmp_path / 'broken.yaml'
    path.write_text('position: [0, 0\n')
    with pytest.raises(ValueError, match='broken.yaml'):
        load_config(path)


@pytest.mark.parametrize('bad', [
    {'width': 'wide'},
    {'fov': None},
    {'near': float('nan')},
    {'side_length': True},
    {'normal_visualization': 'yes'},
    {'position': 5},
    {'clear_color': 'black'},
])
def test_mistyped_values(bad):
    with pytest.raises(ValueError):
        ViewerConfig.from_dict(bad)
