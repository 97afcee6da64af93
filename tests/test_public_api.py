import subprocess
import sys


def test_public_api_exports_required_symbols():
    import gridsift

    required = [
        "collect_samples",
        "guess_format",
        "guess_columns",
        "GuessSettings",
        "CancellationToken",
        "LocaleConfig",
        "DataType",
        "ValueFormat",
        "Column",
        "GuessResult",
        "ClusterCatalogue",
        "ValidationError",
        "SourceReadError",
        "FilterExpressionError",
    ]
    for name in required:
        assert hasattr(gridsift, name)
        assert name in gridsift.__all__

    from gridsift import (  # noqa: F401
        ColumnNotFoundError,
        DataType,
        GuessSettings,
        RowSource,
        guess_format,
    )


def test_all_names_resolve():
    import gridsift

    for name in gridsift.__all__:
        assert getattr(gridsift, name) is not None


def test_import_gridsift_is_lightweight():
    # Verify importing gridsift doesn't eagerly import heavy deps like pandas.
    proc = subprocess.run(
        [
            sys.executable,
            "-c",
            "import sys; import gridsift; print('pandas' in sys.modules)",
        ],
        check=True,
        capture_output=True,
        text=True,
    )
    assert proc.stdout.strip() == "False"
