"""Unit tests for UserService operations."""

import threading
import unittest

from adapter.fake.credential_verifier import FakeCredentialVerifier
from adapter.memory.user_repository import InMemoryUserRepository
from domain.model.result import OperationResult
from domain.model.user import User
from services.token_service import TokenService
from services.user_service import UserService
from utils.keys import generate_key_pair

EMAIL = 'test@mail.com'
PASSWORD = 'somepass'
CAKE = 'cheesecake'


class UserServiceTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        public_pem, private_pem = generate_key_pair()
        cls.token_service = TokenService(public_pem, private_pem)

    def setUp(self):
        self.repo = InMemoryUserRepository()
        self.service = UserService(self.repo, self.token_service, FakeCredentialVerifier())

    def register_default(self):
        result = self.service.register(EMAIL, PASSWORD, CAKE)
        self.assertEqual(result, OperationResult(201, 'registered'))


class TestRegister(UserServiceTestCase):

    def test_register_success(self):
        self.register_default()

        user = self.repo.get(EMAIL)
        self.assertEqual(user.email, EMAIL)
        self.assertEqual(user.favorite_cake, CAKE)

    def test_credential_is_stored_through_verifier(self):
        verifier = FakeCredentialVerifier()
        verifier.hash = lambda plain: f'hashed:{plain}'
        service = UserService(self.repo, self.token_service, verifier)

        service.register(EMAIL, PASSWORD, CAKE)

        self.assertEqual(self.repo.get(EMAIL).password_hash, 'hashed:somepass')

    def test_invalid_email(self):
        result = self.service.register('tes.wrong.email', PASSWORD, CAKE)
        self.assertEqual(result, OperationResult(422, 'email is not valid'))

    def test_short_password(self):
        result = self.service.register(EMAIL, 'some', CAKE)
        self.assertEqual(result, OperationResult(422, 'password too short (at least 8 symbols)'))

    def test_empty_cake(self):
        result = self.service.register(EMAIL, PASSWORD, '')
        self.assertEqual(result, OperationResult(422, 'favorite cake is empty'))

    def test_cake_with_digits(self):
        result = self.service.register(EMAIL, PASSWORD, '111')
        self.assertEqual(result, OperationResult(422, 'favorite cake is only alphabetic'))

    def test_failed_validation_stores_nothing(self):
        self.service.register(EMAIL, 'some', CAKE)
        self.assertIsNone(self.repo.get(EMAIL))

    def test_duplicate_email_rejected(self):
        """A second registration must not overwrite the first one."""
        self.register_default()

        result = self.service.register(EMAIL, 'otherpass', 'brownie')

        self.assertEqual(result, OperationResult(409, 'email already registered'))
        user = self.repo.get(EMAIL)
        self.assertEqual(user.favorite_cake, CAKE)
        self.assertEqual(user.password_hash, PASSWORD)

    def test_concurrent_duplicate_registration(self):
        """Only one of many racing registrations for the same email wins."""
        results = []
        lock = threading.Lock()

        def worker(n):
            result = self.service.register(EMAIL, PASSWORD, f'cake{"x" * n}')
            with lock:
                results.append(result.status)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(results.count(201), 1)
        self.assertEqual(results.count(409), 9)


class TestAuthenticate(UserServiceTestCase):

    def test_unknown_user(self):
        for email in [EMAIL, 'other@mail.com', '']:
            with self.subTest(email=email):
                result = self.service.authenticate(email, PASSWORD)
                self.assertEqual(result, OperationResult(422, 'there is no such user'))

    def test_wrong_password(self):
        self.register_default()

        result = self.service.authenticate(EMAIL, 'wrongpass')

        self.assertEqual(result, OperationResult(422, 'invalid login params'))

    def test_success_returns_token_for_user(self):
        self.register_default()

        result = self.service.authenticate(EMAIL, PASSWORD)

        self.assertEqual(result.status, 200)
        self.assertTrue(result.body)
        self.assertEqual(self.token_service.verify(result.body), EMAIL)


class TestShowMyCake(UserServiceTestCase):

    def test_show(self):
        self.register_default()
        self.assertEqual(self.service.show_my_cake(EMAIL, PASSWORD), OperationResult(200, CAKE))

    def test_unknown_user(self):
        result = self.service.show_my_cake(EMAIL, PASSWORD)
        self.assertEqual(result, OperationResult(422, 'there is no such user'))

    def test_wrong_password(self):
        self.register_default()
        result = self.service.show_my_cake(EMAIL, 'wrongpass')
        self.assertEqual(result, OperationResult(422, 'invalid login params'))


class TestChangeCake(UserServiceTestCase):

    def test_change(self):
        self.register_default()

        result = self.service.change_cake(EMAIL, PASSWORD, 'anothercake')

        self.assertEqual(result, OperationResult(200, 'cake successful changed'))
        self.assertEqual(self.repo.get(EMAIL).favorite_cake, 'anothercake')

    def test_idempotent(self):
        self.register_default()

        first = self.service.change_cake(EMAIL, PASSWORD, 'anothercake')
        second = self.service.change_cake(EMAIL, PASSWORD, 'anothercake')

        self.assertEqual(first, second)
        self.assertEqual(self.repo.get(EMAIL).favorite_cake, 'anothercake')

    def test_new_cake_validated(self):
        self.register_default()

        self.assertEqual(
            self.service.change_cake(EMAIL, PASSWORD, ''),
            OperationResult(422, 'favorite cake is empty'),
        )
        self.assertEqual(
            self.service.change_cake(EMAIL, PASSWORD, '111'),
            OperationResult(422, 'favorite cake is only alphabetic'),
        )
        self.assertEqual(self.repo.get(EMAIL).favorite_cake, CAKE)

    def test_credentials_checked_before_new_value(self):
        self.register_default()

        result = self.service.change_cake(EMAIL, 'wrongpass', '111')

        self.assertEqual(result, OperationResult(422, 'invalid login params'))

    def test_unknown_user(self):
        result = self.service.change_cake(EMAIL, PASSWORD, 'anothercake')
        self.assertEqual(result, OperationResult(422, 'there is no such user'))


class TestChangeEmail(UserServiceTestCase):

    def test_change(self):
        self.register_default()

        result = self.service.change_email(EMAIL, PASSWORD, 'test2@mail.com')

        self.assertEqual(result, OperationResult(200, 'email successful changed'))
        self.assertIsNone(self.repo.get(EMAIL))
        user = self.repo.get('test2@mail.com')
        self.assertEqual(user.email, 'test2@mail.com')
        self.assertEqual(user.favorite_cake, CAKE)

    def test_login_with_old_email_fails(self):
        self.register_default()
        self.service.change_email(EMAIL, PASSWORD, 'test2@mail.com')

        self.assertEqual(
            self.service.authenticate(EMAIL, PASSWORD),
            OperationResult(422, 'there is no such user'),
        )
        self.assertEqual(self.service.authenticate('test2@mail.com', PASSWORD).status, 200)

    def test_invalid_new_email(self):
        self.register_default()

        result = self.service.change_email(EMAIL, PASSWORD, 'tes.wrong.email')

        self.assertEqual(result, OperationResult(422, 'email is not valid'))
        self.assertIsNotNone(self.repo.get(EMAIL))

    def test_new_email_taken(self):
        self.register_default()
        self.service.register('other@mail.com', 'otherpass', 'brownie')

        result = self.service.change_email(EMAIL, PASSWORD, 'other@mail.com')

        self.assertEqual(result, OperationResult(409, 'email already registered'))
        self.assertEqual(self.repo.get('other@mail.com').favorite_cake, 'brownie')
        self.assertEqual(self.repo.get(EMAIL).favorite_cake, CAKE)

    def test_same_email(self):
        self.register_default()

        result = self.service.change_email(EMAIL, PASSWORD, EMAIL)

        self.assertEqual(result, OperationResult(200, 'email successful changed'))
        self.assertIsNotNone(self.repo.get(EMAIL))

    def test_wrong_password(self):
        self.register_default()

        result = self.service.change_email(EMAIL, 'wrongpass', 'test2@mail.com')

        self.assertEqual(result, OperationResult(422, 'invalid login params'))
        self.assertIsNone(self.repo.get('test2@mail.com'))


class TestChangePassword(UserServiceTestCase):

    def test_change(self):
        self.register_default()

        result = self.service.change_password(EMAIL, PASSWORD, 'newpasss')

        self.assertEqual(result, OperationResult(200, 'password successful changed'))
        self.assertEqual(
            self.service.authenticate(EMAIL, PASSWORD),
            OperationResult(422, 'invalid login params'),
        )
        self.assertEqual(self.service.authenticate(EMAIL, 'newpasss').status, 200)

    def test_new_password_too_short(self):
        self.register_default()

        result = self.service.change_password(EMAIL, PASSWORD, 'short')

        self.assertEqual(result, OperationResult(422, 'password too short (at least 8 symbols)'))
        self.assertEqual(self.service.authenticate(EMAIL, PASSWORD).status, 200)

    def test_unknown_user(self):
        result = self.service.change_password(EMAIL, PASSWORD, 'newpasss')
        self.assertEqual(result, OperationResult(422, 'there is no such user'))


class TestUnmappedErrors(UserServiceTestCase):

    def test_unexpected_errors_propagate(self):
        """Only domain errors become results; anything else reaches the transport."""
        class BrokenVerifier(FakeCredentialVerifier):
            def verify(self, plain, hashed):
                raise RuntimeError('backend down')

        self.repo.save(User(email=EMAIL, password_hash=PASSWORD, favorite_cake=CAKE))
        service = UserService(self.repo, self.token_service, BrokenVerifier())

        with self.assertRaises(RuntimeError):
            service.authenticate(EMAIL, PASSWORD)


class GatedCredentialVerifier(FakeCredentialVerifier):
    """Blocks verify() in one chosen thread until released, like a slow hash."""

    def __init__(self):
        self.gated_thread: str | None = None
        self.entered = threading.Event()
        self.release = threading.Event()

    def verify(self, plain, hashed):
        if threading.current_thread().name == self.gated_thread:
            self.entered.set()
            self.release.wait(timeout=5)
        return super().verify(plain, hashed)


class TestConcurrentMutations(UserServiceTestCase):
    """Credential checks run outside the store lock; the change is re-checked under it."""

    def setUp(self):
        super().setUp()
        self.verifier = GatedCredentialVerifier()
        self.service = UserService(self.repo, self.token_service, self.verifier)
        self.register_default()
        self.results = {}

    def start_gated(self, name, func, *args):
        self.verifier.gated_thread = name

        def run():
            self.results[name] = func(*args)

        thread = threading.Thread(target=run, name=name)
        thread.start()
        self.assertTrue(self.verifier.entered.wait(timeout=2))
        return thread

    def finish(self, thread):
        self.verifier.release.set()
        thread.join(timeout=5)
        self.assertFalse(thread.is_alive())

    def test_slow_credential_check_does_not_block_other_users(self):
        self.service.register('other@mail.com', 'otherpass', 'brownie')
        worker = self.start_gated('slow-change', self.service.change_cake, EMAIL, PASSWORD, 'anothercake')

        reader = threading.Thread(target=lambda: self.results.setdefault('read', self.repo.get('other@mail.com')))
        reader.start()
        reader.join(timeout=2)
        self.assertFalse(reader.is_alive())
        self.assertEqual(self.results['read'].favorite_cake, 'brownie')
        self.assertEqual(self.service.show_my_cake('other@mail.com', 'otherpass'), OperationResult(200, 'brownie'))

        self.finish(worker)
        self.assertEqual(self.results['slow-change'], OperationResult(200, 'cake successful changed'))

    def test_cake_change_after_concurrent_password_change_is_rejected(self):
        worker = self.start_gated('slow-change', self.service.change_cake, EMAIL, PASSWORD, 'anothercake')

        result = self.service.change_password(EMAIL, PASSWORD, 'newpasss')
        self.assertEqual(result, OperationResult(200, 'password successful changed'))

        self.finish(worker)
        self.assertEqual(self.results['slow-change'], OperationResult(422, 'invalid login params'))
        user = self.repo.get(EMAIL)
        self.assertEqual(user.password_hash, 'newpasss')
        self.assertEqual(user.favorite_cake, CAKE)

    def test_password_change_keeps_concurrent_cake_change(self):
        worker = self.start_gated('slow-change', self.service.change_password, EMAIL, PASSWORD, 'newpasss')

        result = self.service.change_cake(EMAIL, PASSWORD, 'anothercake')
        self.assertEqual(result, OperationResult(200, 'cake successful changed'))

        self.finish(worker)
        self.assertEqual(self.results['slow-change'], OperationResult(200, 'password successful changed'))
        user = self.repo.get(EMAIL)
        self.assertEqual(user.password_hash, 'newpasss')
        self.assertEqual(user.favorite_cake, 'anothercake')

    def test_change_after_concurrent_email_change_is_rejected(self):
        worker = self.start_gated('slow-change', self.service.change_cake, EMAIL, PASSWORD, 'anothercake')

        result = self.service.change_email(EMAIL, PASSWORD, 'test2@mail.com')
        self.assertEqual(result, OperationResult(200, 'email successful changed'))

        self.finish(worker)
        self.assertEqual(self.results['slow-change'], OperationResult(422, 'there is no such user'))
        self.assertIsNone(self.repo.get(EMAIL))
        self.assertEqual(self.repo.get('test2@mail.com').favorite_cake, CAKE)


if __name__ == '__main__':
    unittest.main()
