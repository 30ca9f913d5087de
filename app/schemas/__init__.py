# File: app/schemas/__init__.py
from .application import (
    Application, ApplicationCreate, ApplicationStatusUpdate, ApplicationSubmitted,
    ApplicationStatusSummary, ApplicationTransitionResponse,
)
from .member import (
    Member, MemberCreate, MemberUpdate, MemberProfileUpdate, MemberList,
    MemberPublic, DirectoryPage, DirectoryVisibility, MembershipVerification,
    ExistingMember, ExistingMemberCreate, ExistingMemberCreated, UploadResult,
)
from .user import User, UserCreate, UserUpdate
from .admin import Admin, AdminCreate, AdminUpdate, AdminProfileUpdate, AdminList, AdminCreated
from .auth import (
    LoginRequest, Token, CreateAccountRequest, ForgotPasswordRequest,
    ResetPasswordRequest, ChangePasswordRequest, TokenCheck, MessageResponse,
)
from .contact import ContactRequest
