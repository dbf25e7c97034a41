#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
**RadioCalib**

Radiocarbon calibration of a single date from the command line

"""

from radiocalib import Calibrator, Date, RadioCalibError
from radiocalib import __version__

import argparse
import logging
import sys

DESCRIPTION = "RadioCalib v%s - Radiocarbon calibration, realm conversion and contamination modelling" % (__version__)


def parse_arguments(args):

	parser = argparse.ArgumentParser(description=DESCRIPTION, formatter_class=argparse.ArgumentDefaultsHelpFormatter)

	parser.add_argument('-age', type=float, required=True,
		help="Measured value (C-14 age BP, or F14C / pMC, see -realm)")
	parser.add_argument('-uncertainty', type=float, required=True,
		help="Lab error (one sigma)")
	parser.add_argument('-name', type=str, default="date", required=False,
		help="Sample ID")
	parser.add_argument('-realm', type=str, default="C14", required=False,
		help="Realm of the measured value ('C14', 'F14C' or 'pMC')")
	parser.add_argument('-curve', type=str, default="IntCal20", required=False,
		help="Calibration curve (IntCal20, Marine20 or SHCal20)")
	parser.add_argument('-postbomb', type=str, default=None, required=False,
		help="Postbomb curve to glue to the calibration curve (nh1, nh2, nh3, sh1-2 or sh3)")
	parser.add_argument('-curve_dir', type=str, default="curves", required=False,
		help="Directory with the calibration curve files")
	parser.add_argument('-download', type=int, default=0, required=False,
		help="Flag indicating whether to download missing curve files")
	parser.add_argument('-delta_r', type=float, default=0, required=False,
		help="Reservoir age offset")
	parser.add_argument('-delta_std', type=float, default=0, required=False,
		help="Uncertainty of the reservoir age offset")
	parser.add_argument('-prob', type=float, default=0.95, required=False,
		help="Probability of the hpd ranges")
	parser.add_argument('-bcad', type=int, default=0, required=False,
		help="Flag indicating whether to report calendar ages in BC/AD")
	parser.add_argument('-t_model', type=int, default=0, required=False,
		help="Flag indicating whether to use the Student-t model instead of the normal model")
	parser.add_argument('-verbose', type=int, default=0, required=False,
		help="Flag indicating whether to show debug messages")

	parsed_args = parser.parse_args(args)
	return vars(parsed_args)  # Directly return parsed arguments as a dictionary


if __name__ == '__main__':

	arguments = parse_arguments(sys.argv[1:])

	logging.basicConfig(
		level=logging.DEBUG if arguments['verbose'] else logging.INFO,
		format="%(levelname)s %(name)s: %(message)s",
	)

	print()
	print(DESCRIPTION)
	print()
	print("use option -h or --help to show help message")
	print()

	try:
		calibrator = Calibrator.from_curve_id(
			arguments['curve'], arguments['curve_dir'], postbomb=arguments['postbomb'],
			download=bool(arguments['download']), prob=arguments['prob'], bcad=bool(arguments['bcad']),
			normal=not bool(arguments['t_model']),
		)
		date = Date(arguments['name'], arguments['age'], arguments['uncertainty'], realm=arguments['realm'],
					delta_r=arguments['delta_r'], delta_std=arguments['delta_std'])
		date.calibrate(calibrator)
	except (RadioCalibError, ValueError) as e:
		print("Error: %s" % (e))
		sys.exit(1)

	density = date.density
	estimates = calibrator.point_estimates(density)

	print("Date:                %s" % date.name)
	print("   Measured value:   %s +- %s (%s)" % (date.age, date.uncertainty, date.realm))
	print("   Curve:            %s" % (calibrator.cc.value if calibrator.cc is not None else arguments['curve']))
	print()
	print("%s%% hpd ranges (%s):" % (round(100 * date.prob, 1), density.labels[0]))
	for rng_from, rng_to, perc in date.ranges:
		print("   %s to %s (%s%%)" % (rng_from, rng_to, perc))
	print()
	print("Point estimates:")
	for key, value in estimates.items():
		print("   %-15s %s" % (key + ":", value))
	print()
