# blog_api/api/auth/services.py
import uuid
import hashlib
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from firebase_admin import firestore

from blog_api.core.exceptions import DuplicateResourceError, InvalidCredentialsError, ResourceNotFoundError
from blog_api.core.security import hash_password, verify_password
from blog_api.models.user import User, UserRole
from blog_api.utils.datetime_utils import DateTimeUtils


class AuthService:
    """
    회원가입/로그인, 본인 프로필, 토큰 무효화(Blocklist)를 담당하는 서비스 클래스.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')
        self.user_emails_ref = self.db.collection('user_emails')
        self.revoked_tokens_ref = self.db.collection('revoked_tokens')

    def _find_user_by_email(self, email: str):
        query = self.users_ref.where('email', '==', email.lower()).limit(1).stream()
        return next(query, None)

    def _email_key_ref(self, email: str):
        """이메일마다 하나씩 존재하는 키 문서. 문서 ID 제약('/' 등) 때문에 해시를 사용합니다."""
        return self.user_emails_ref.document(hashlib.sha256(email.lower().encode('utf-8')).hexdigest())

    def register_user(self, name: str, email: str, password: str, role: UserRole = UserRole.USER) -> User:
        """
        이메일 키 문서와 사용자 문서를 한 트랜잭션에서 생성합니다.
        동시에 같은 이메일로 가입해도 키 문서를 먼저 차지한 요청만 성공합니다.
        """
        user = User(
            user_id=str(uuid.uuid4()),
            name=name,
            email=email.lower(),
            password_hash=hash_password(password),
            role=role,
        )
        transaction = self.db.transaction()

        @firestore.transactional
        def _register_in_transaction(transaction, user):
            key_ref = self._email_key_ref(user.email)
            if key_ref.get(transaction=transaction).exists:
                raise DuplicateResourceError("이미 가입된 이메일입니다.", error_code="EMAIL_ALREADY_EXISTS")
            transaction.create(key_ref, {'email': user.email, 'user_id': user.user_id})
            transaction.set(self.users_ref.document(user.user_id), DateTimeUtils.for_firestore(user.to_dict()))

        try:
            _register_in_transaction(transaction, user)
        except DuplicateResourceError:
            raise
        except Exception as e:
            logging.error(f"회원가입 저장 실패 (email: {email}): {e}", exc_info=True)
            raise
        logging.info(f"신규 사용자 가입 완료 (user_id: {user.user_id})")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """이메일/비밀번호가 일치하는 사용자를 반환합니다. 실패 원인은 구분하지 않습니다."""
        user_doc = self._find_user_by_email(email)
        if not user_doc:
            raise InvalidCredentialsError()
        user = User.from_dict(user_doc.to_dict())
        if not verify_password(user.password_hash, password):
            raise InvalidCredentialsError()
        return user

    def get_user(self, user_id: str) -> User:
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            raise ResourceNotFoundError("사용자를 찾을 수 없습니다.", error_code="USER_NOT_FOUND")
        return User.from_dict(doc.to_dict())

    def update_profile(self, user_id: str, changes: Dict[str, Any]) -> User:
        """이름, 소개, 아바타를 부분 수정합니다."""
        user = self.get_user(user_id)
        if not changes:
            return user
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = DateTimeUtils.now()
        try:
            self.users_ref.document(user_id).update(DateTimeUtils.for_firestore({**changes, 'updated_at': user.updated_at}))
        except Exception as e:
            logging.error(f"프로필 수정 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise
        return user

    # --- Blocklist 관련 로직 ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """전달받은 토큰의 jti를 만료 시간과 함께 Firestore에 저장합니다."""
        token_data = {
            'revoked_at': DateTimeUtils.now(),
            'expires_at': expires
        }
        self.revoked_tokens_ref.document(jti).set(DateTimeUtils.for_firestore(token_data))

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        jti = jwt_payload['jti']
        doc = self.revoked_tokens_ref.document(jti).get()
        return doc.exists

    def logout_user(self, access_jti: str, access_exp: int, refresh_jti: str, refresh_exp: int):
        """Access 토큰과 Refresh 토큰을 모두 Blocklist에 추가합니다."""
        access_expires = datetime.fromtimestamp(access_exp, tz=timezone.utc)
        refresh_expires = datetime.fromtimestamp(refresh_exp, tz=timezone.utc)
        try:
            self.add_token_to_blocklist(access_jti, access_expires)
            self.add_token_to_blocklist(refresh_jti, refresh_expires)
        except Exception as e:
            logging.error(f"Blocklist 토큰 추가 실패: {e}", exc_info=True)
            raise
        logging.info(f"사용자 로그아웃 처리 완료. JTI: {access_jti[:8]}..., {refresh_jti[:8]}...")
