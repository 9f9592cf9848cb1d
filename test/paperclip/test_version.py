import pathlib
import runpy

from paperclip import version


def test_version(capsys):
    here = pathlib.Path(__file__).absolute().parent
    version_file = here / ".." / ".." / "paperclip" / "version.py"
    runpy.run_path(str(version_file), run_name="__main__")
    stdout, stderr = capsys.readouterr()
    assert len(stdout) > 0
    assert stdout.strip() == version.VERSION
