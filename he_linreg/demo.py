"""End-to-end run: encrypted fit and prediction compared with plain results.

    python -m he_linreg.demo --encoding rational
    python -m he_linreg.demo --encoding fixed_point --csv data.csv --x-column age --y-column bmi
"""

import argparse
import logging
from time import time

import numpy as np
import pandas as pd

from he_linreg import stats
from he_linreg.client import Client
from he_linreg.config import VEC_SIZE
from he_linreg.encoding import EncodingKind
from he_linreg.server import Server

X_TRAIN = [1.0, 2.0, 3.0, 4.0, 5.0]
Y_TRAIN = [2.0, 4.0, 6.0, 8.0, 10.0]
X_TEST = [6.0, 7.0, 8.0, 9.0, 10.0]
Y_TEST = [12.0, 14.0, 16.0, 18.0, 20.0]


def args_parser(argv=None):
    parser = argparse.ArgumentParser(
        description="linear regression on homomorphically encrypted data."
    )
    parser.add_argument(
        "-e",
        "--encoding",
        type=str,
        default=EncodingKind.RATIONAL.value,
        choices=[kind.value for kind in EncodingKind],
        help="numeric encoding used for every ciphertext",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="CSV file to read the data from (defaults to a built-in perfect line)",
    )
    parser.add_argument("--x-column", type=str, default="x", help="feature column of the CSV")
    parser.add_argument("--y-column", type=str, default="y", help="target column of the CSV")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log circuit timings"
    )
    return parser.parse_args(argv)


def csv_data(path, x_column, y_column):
    # the first VEC_SIZE rows train the model, the next VEC_SIZE test it
    data = pd.read_csv(path)
    data = data[[x_column, y_column]].dropna()
    if len(data) < 2 * VEC_SIZE:
        raise SystemExit(f"{path} needs at least {2 * VEC_SIZE} complete rows")
    x = data[x_column].to_numpy(dtype=float)
    y = data[y_column].to_numpy(dtype=float)
    return (
        x[:VEC_SIZE].tolist(),
        y[:VEC_SIZE].tolist(),
        x[VEC_SIZE:2 * VEC_SIZE].tolist(),
        y[VEC_SIZE:2 * VEC_SIZE].tolist(),
    )


def main(argv=None):
    args = args_parser(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    encoding = EncodingKind(args.encoding)

    if args.csv:
        x_train, y_train, x_test, y_test = csv_data(args.csv, args.x_column, args.y_column)
    else:
        x_train, y_train, x_test, y_test = X_TRAIN, Y_TRAIN, X_TEST, Y_TEST

    print("############# Data summary #############")
    print(f"encoding: {encoding.value}")
    print(f"x_train: {x_train}")
    print(f"y_train: {y_train}")
    print(f"x_test: {x_test}")
    print("#######################################\n")

    plain_intercept, plain_coefficient = stats.fit(x_train, y_train, 1.0 / VEC_SIZE)
    print(f"Plain model: f(x) = {plain_intercept} + {plain_coefficient}*x")

    client = Client(encoding)
    server = Server(client.public_key)

    t_start = time()
    enc_x_train = client.encrypt_vector(x_train)
    enc_y_train = client.encrypt_vector(y_train)
    var_x_inverse = None
    if encoding is EncodingKind.FIXED_POINT:
        var_x_inverse = client.variance_inverse(x_train)
    t_end = time()
    print(f"Encryption of the training_set took {t_end - t_start:.2f} seconds")

    t_start = time()
    model = server.fit(enc_x_train, enc_y_train, var_x_inverse)
    t_end = time()
    print(f"Encrypted fit took {t_end - t_start:.2f} seconds")

    intercept, coefficient = client.decrypt_model(model)
    print(f"Encrypted model: f(x) = {intercept} + {coefficient}*x")

    t_start = time()
    enc_y_pred = server.predict_list(model, [client.encrypt(x) for x in x_test])
    t_end = time()
    print(f"Evaluated test_set of {len(x_test)} entries in {t_end - t_start:.2f} seconds")

    y_pred = client.decrypt_vector(enc_y_pred)
    plain_pred = [stats.predict(plain_intercept, plain_coefficient, x) for x in x_test]
    print(f"Encrypted predictions: {np.round(y_pred, 6).tolist()}")
    print(f"Plain predictions: {np.round(plain_pred, 6).tolist()}")
    print(f"RMSE (encrypted model): {client.evaluate(y_test, y_pred)}")
    print(f"RMSE (plain model): {client.evaluate(y_test, plain_pred)}")


if __name__ == "__main__":
    main()
