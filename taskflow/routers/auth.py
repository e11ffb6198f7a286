from datetime import datetime, timedelta
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from jose import JWTError, jwt
import bcrypt
from sqlmodel import Session, select

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, SECRET_KEY
from ..database import get_db
from ..errors import AuthenticationError, ConflictError
from ..models import User
from ..schemas.user import AuthResponse, LoginRequest, UserCreate

router = APIRouter()
logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt directly."""
    password_bytes = password.encode('utf-8')[:72]  # Truncate to 72 bytes (bcrypt limit)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.exec(select(User).where(User.email == email)).first()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for valid credentials, else None."""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token whose subject is the user id."""
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode({"sub": user_id, "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)


def _get_token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def decode_access_token(token: str) -> Optional[str]:
    """Return the user id carried by ``token``, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    user_id = payload.get("sub")
    return user_id if isinstance(user_id, str) and user_id else None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token on the request to a user."""
    token = _get_token_from_request(request)
    if not token:
        raise AuthenticationError("Not authenticated")

    user_id = decode_access_token(token)
    if not user_id:
        logger.warning("Rejected invalid or expired token on %s", request.url.path)
        raise AuthenticationError("Invalid token")

    user = db.get(User, user_id)
    if user is None:
        logger.warning("Token subject %s no longer exists", user_id)
        raise AuthenticationError("Invalid token")
    return user


def _auth_response(user: User) -> dict:
    return {
        "token": create_access_token(user.id),
        "token_type": "bearer",
        "user": user,
    }


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: UserCreate,
    db: Session = Depends(get_db),
):
    """Create a new user account and sign it in."""
    if get_user_by_email(db, payload.email):
        raise ConflictError("Email already registered")

    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
):
    """Sign in and get a bearer token."""
    user = authenticate_user(db, payload.email, payload.password)
    if not user:
        logger.warning("Failed login for %s", payload.email)
        raise AuthenticationError("Invalid email or password")
    return _auth_response(user)
