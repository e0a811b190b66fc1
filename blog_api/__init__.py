# blog_api/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify, request
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials

# - 설정 및 공통 예외
from blog_api.core.config import config_by_name
from blog_api.core.exceptions import BlogAPIError

# - API 블루프린트
from blog_api.api.auth.routes import auth_bp
from blog_api.api.users.routes import users_bp
from blog_api.api.posts.routes import posts_bp
from blog_api.api.categories.routes import categories_bp
from blog_api.api.comments.routes import comments_bp

# - 서비스 클래스
from blog_api.api.auth.services import AuthService
from blog_api.api.users.services import UserService
from blog_api.api.posts.services import PostService
from blog_api.api.categories.services import CategoryService
from blog_api.api.comments.services import CommentService

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'


def init_firebase(app: Flask) -> None:
    """서비스 계정 키로 Firebase Admin SDK(Firestore)를 한 번만 초기화합니다."""
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    firebase_admin.initialize_app(credentials.Certificate(cred_path))


def build_services() -> dict:
    """
    서비스 인스턴스를 생성합니다.
    다른 서비스를 주입받아야 하는 서비스는 기반 서비스 뒤에 생성합니다.
    """
    services = {}
    services['auth'] = AuthService()
    services['categories'] = CategoryService()
    services['posts'] = PostService(category_service=services['categories'])
    services['comments'] = CommentService()
    services['users'] = UserService(post_service=services['posts'])
    return services


def register_jwt_callbacks(jwt: JWTManager, app: Flask) -> None:
    """토큰 무효화 확인 및 인증 오류 응답 형식을 통일합니다."""

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return app.services['auth'].is_token_revoked(jwt_payload)

    @jwt.unauthorized_loader
    def missing_token_callback(reason):
        return jsonify({"error_code": "AUTHORIZATION_REQUIRED", "message": "로그인이 필요합니다."}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return jsonify({"error_code": "INVALID_TOKEN", "message": "유효하지 않은 토큰입니다."}), 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"error_code": "TOKEN_EXPIRED", "message": "토큰이 만료되었습니다."}), 401

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify({"error_code": "TOKEN_REVOKED", "message": "로그아웃된 토큰입니다."}), 401


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(BlogAPIError)
    def handle_domain_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        error_code = (err.name or "HTTP_ERROR").upper().replace(' ', '_')
        return jsonify({"error_code": error_code, "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500


def create_app(config_name=None, services=None):
    """
    Flask 애플리케이션 팩토리 함수.
    services를 넘기면 Firebase 초기화를 건너뛰고 주어진 서비스를 그대로 사용합니다. (테스트용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False
    app.url_map.strict_slashes = False

    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO, format=LOG_FORMAT)

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    jwt = JWTManager(app)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    if services is None:
        init_firebase(app)
        services = build_services()
        logging.info("Firestore services initialized successfully")
    app.services = services

    register_jwt_callbacks(jwt, app)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(categories_bp, url_prefix='/api/categories')
    app.register_blueprint(comments_bp, url_prefix='/api/comments')

    @app.route('/')
    def index():
        return jsonify({"name": "Blog API", "status": "ok"})

    if app.debug:
        @app.before_request
        def log_request():
            logging.debug(f"{request.method} {request.path}")

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    register_error_handlers(app)

    logging.info(f"Flask app created for '{config_name}' environment.")
    return app
