"""drivesweep - disk space reclamation for the Windows system drive."""

__version__ = "0.1.0"
