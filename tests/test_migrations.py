import re
from pathlib import Path

VERSIONS = Path(__file__).resolve().parent.parent / 'migrations' / 'versions'


def _revision(path):
    match = re.search(r"^revision = '([0-9a-f]+)'$", path.read_text(encoding='utf-8'), re.MULTILINE)
    assert match, path.name
    return match.group(1)


def test_revision_files_are_named_after_their_revision():
    scripts = sorted(VERSIONS.glob('*.py'))
    assert scripts
    for script in scripts:
        revision = _revision(script)
        assert re.fullmatch(r'[0-9a-f]{12}', revision)
        assert script.name.startswith(f'{revision}_')


def test_single_head():
    down_revisions = set()
    revisions = set()
    for script in VERSIONS.glob('*.py'):
        revisions.add(_revision(script))
        down = re.search(r"^down_revision = '?([0-9a-f]+|None)'?$", script.read_text(encoding='utf-8'), re.MULTILINE)
        down_revisions.add(down.group(1))
    assert len(revisions - down_revisions) == 1
