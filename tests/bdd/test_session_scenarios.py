from pytest_bdd import scenarios, given, when, parsers
from obani.cli.main import cli
from obani.models import ApiResult, AuthState, User

scenarios("features/session.feature")

_ANA = User(id="u1", email="ana@obani.io", name="Ana Silva")


@given("the server accepts the credentials")
def server_accepts(mock_api):
    mock_api.login.return_value = ApiResult(success=True, data=AuthState(user=_ANA, token="tok-ana"), status=200)


@given(parsers.parse('the server rejects the credentials with "{message}"'))
def server_rejects(mock_api, message):
    mock_api.login.return_value = ApiResult(success=False, error=message, status=401)


@when(parsers.parse('the user logs in as "{email}"'))
def log_in(runner, context, email):
    context["result"] = runner.invoke(cli, ["login", "--email", email, "--password", "secret"])


@when("the user asks who is signed in")
def who_am_i(runner, context):
    context["result"] = runner.invoke(cli, ["whoami"])


@when("the user logs out")
def log_out(runner, context):
    context["result"] = runner.invoke(cli, ["logout"])
