# tests/unit/test_progress.py
from gdalbridge.ports.progress import ProgressFunc, as_native_callback, dummy_progress, term_progress

def test_none_progress_gives_no_callback():
    assert as_native_callback(None) is None

def test_proxy_threads_caller_data_and_maps_bool():
    seen = []

    def prog(complete, message, data):
        seen.append((complete, message, data))
        return complete < 0.9

    cb = as_native_callback(prog, {"job": 1})
    assert cb(0.25, None, "lo-que-pase-gdal") == 1
    assert cb(0.95, "casi", None) == 0
    assert seen == [(0.25, "", {"job": 1}), (0.95, "casi", {"job": 1})]

def test_builtin_progress_funcs(capsys):
    assert isinstance(dummy_progress, ProgressFunc)
    assert dummy_progress(0.3, "", None)
    assert term_progress(1.0, "listo", None)
    assert "100% listo" in capsys.readouterr().err
