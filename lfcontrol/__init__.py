"""Linear feedback joint-torque control: rigid-body model, PD start-up, linear feedback law and chainable controllers."""

__version__ = "0.1.0"