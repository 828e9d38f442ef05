"""
Commissioning Module - BRL 100/200 installation sign-off.

Features:
- Ordered steps with typed required checks
- Tool registration with the at-least-one-serial rule and calibration expiry
- Free navigation, gated finish producing an audit record
"""

from .steps import (
    CommissioningStep,
    STEP_ORDER,
    STEP_TITLES,
    STEP_CHECK_TYPES,
    StepChecks,
    PreparationChecks,
    MaterialsChecks,
    OutdoorUnitChecks,
    IndoorUnitChecks,
    PipingChecks,
    EvacuationChargingChecks,
    HandoverChecks,
    ToolRegistration,
    TOOLS,
    CALIBRATED_TOOLS,
    CALIBRATION_VALIDITY_MONTHS,
    expiring_calibrations,
    SERIAL_FIELDS,
)
from .record import InstallationType, InstallationDetails, InstallationRecord
from .checklist import CommissioningChecklist, checklist_template

__all__ = [
    'CommissioningStep', 'STEP_ORDER', 'STEP_TITLES', 'STEP_CHECK_TYPES',
    'StepChecks', 'PreparationChecks', 'MaterialsChecks', 'OutdoorUnitChecks',
    'IndoorUnitChecks', 'PipingChecks', 'EvacuationChargingChecks', 'HandoverChecks',
    'ToolRegistration', 'TOOLS', 'CALIBRATED_TOOLS', 'CALIBRATION_VALIDITY_MONTHS',
    'SERIAL_FIELDS', 'expiring_calibrations',
    'InstallationType', 'InstallationDetails', 'InstallationRecord',
    'CommissioningChecklist', 'checklist_template',
]
