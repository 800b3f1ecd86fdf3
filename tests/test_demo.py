import pandas as pd
import pytest

from he_linreg.demo import args_parser, csv_data, main


def test_args_defaults() -> None:
    args = args_parser([])
    assert args.encoding == "rational"
    assert args.csv is None
    assert not args.verbose


def test_args_reject_unknown_encoding() -> None:
    with pytest.raises(SystemExit):
        args_parser(["--encoding", "floating"])


def test_csv_data_splits_train_and_test(tmp_path) -> None:
    path = tmp_path / "data.csv"
    frame = pd.DataFrame({"age": [float(i) for i in range(1, 12)], "bmi": [2.0 * i for i in range(1, 12)]})
    frame.loc[2, "bmi"] = None
    frame.to_csv(path, index=False)

    x_train, y_train, x_test, y_test = csv_data(path, "age", "bmi")
    # the row with a missing target is dropped
    assert x_train == [1.0, 2.0, 4.0, 5.0, 6.0]
    assert y_train == [2.0, 4.0, 8.0, 10.0, 12.0]
    assert x_test == [7.0, 8.0, 9.0, 10.0, 11.0]
    assert y_test == [14.0, 16.0, 18.0, 20.0, 22.0]


def test_csv_data_needs_enough_rows(tmp_path) -> None:
    path = tmp_path / "short.csv"
    pd.DataFrame({"x": [1.0, 2.0], "y": [2.0, 4.0]}).to_csv(path, index=False)
    with pytest.raises(SystemExit):
        csv_data(path, "x", "y")


def test_main_prints_both_models(capsys) -> None:
    main(["--encoding", "rational"])
    out = capsys.readouterr().out
    assert "Encryption of the training_set took" in out
    assert "Evaluated test_set of 5 entries" in out
    assert "RMSE (encrypted model)" in out
