from app.forms.auth_forms import LoginForm
from app.forms.base_forms import BaseSiteForm
from app.forms.asset_forms import AssetTypeForm, AssetTypeUpdateForm, AssetForm, AssetUpdateForm
from app.forms.personnel_forms import PersonnelForm, PersonnelUpdateForm
from app.forms.transfer_forms import TransferForm, TransferRejectForm
from app.forms.purchase_forms import PurchaseForm, PurchaseUpdateForm
from app.forms.expenditure_forms import ExpenditureForm, ExpenditureUpdateForm
from app.forms.assignment_forms import (
    AssignmentForm,
    AssignmentReturnForm,
    AssignmentWriteOffForm,
    AssignmentUpdateForm
)

__all__ = [
    'LoginForm',
    'BaseSiteForm',
    'AssetTypeForm', 'AssetTypeUpdateForm', 'AssetForm', 'AssetUpdateForm',
    'PersonnelForm', 'PersonnelUpdateForm',
    'TransferForm', 'TransferRejectForm',
    'PurchaseForm', 'PurchaseUpdateForm',
    'ExpenditureForm', 'ExpenditureUpdateForm',
    'AssignmentForm', 'AssignmentReturnForm', 'AssignmentWriteOffForm', 'AssignmentUpdateForm'
]
