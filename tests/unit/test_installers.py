from __future__ import annotations

from pathlib import Path

import pytest
from conftest import GO_YQ_VERSION, JQ_WRAPPER_YQ_VERSION, FakeRunner

from lunafirpay_deploy.installer.env_node import ensure_node, prepare_node_env, tool_version
from lunafirpay_deploy.installer.packages import PackageInstaller
from lunafirpay_deploy.installer.yq import ensure_yq, is_mikefarah_yq
from lunafirpay_deploy.settings import NODESOURCE_DEB, NODESOURCE_RPM, YQ_RELEASE_URL, DeploySettings
from lunafirpay_deploy.types import Arch, PackageManager

URLS = DeploySettings().nodesource_urls


def test_node_present_is_skipped(fake_fetch):
    runner = FakeRunner(tools={"node": "/usr/bin/node"})
    assert ensure_node(PackageInstaller(PackageManager.APT, runner), URLS, fetch=fake_fetch) is False
    assert runner.calls == []
    assert fake_fetch.urls == []


def test_node_apt_uses_nodesource(fake_fetch):
    runner = FakeRunner()
    assert ensure_node(PackageInstaller(PackageManager.APT, runner), URLS, fetch=fake_fetch) is True

    assert fake_fetch.urls == [NODESOURCE_DEB]
    assert runner.calls[0][:3] == ["sudo", "-E", "bash"]
    assert runner.calls[1] == ["sudo", "apt", "install", "-y", "nodejs"]
    assert not Path(runner.calls[0][3]).exists()


@pytest.mark.parametrize("pm", [PackageManager.DNF, PackageManager.YUM])
def test_node_rpm_family(pm, fake_fetch):
    runner = FakeRunner()
    ensure_node(PackageInstaller(pm, runner), URLS, fetch=fake_fetch)

    assert fake_fetch.urls == [NODESOURCE_RPM]
    assert runner.calls[0][:2] == ["sudo", "bash"]
    assert runner.calls[1] == ["sudo", pm.value, "install", "-y", "nodejs"]


@pytest.mark.parametrize("pm", [PackageManager.PACMAN, PackageManager.APK])
def test_node_from_distro_repos(pm, fake_fetch):
    runner = FakeRunner()
    ensure_node(PackageInstaller(pm, runner), URLS, fetch=fake_fetch)

    assert fake_fetch.urls == []
    assert runner.calls[-1][-2:] == ["nodejs", "npm"]


def _ensure(runner, pm, arch, target, fetch):
    return ensure_yq(
        PackageInstaller(pm, runner),
        arch,
        release_url=YQ_RELEASE_URL,
        install_path=target,
        fetch=fetch,
    )


def test_yq_present_is_skipped(fake_fetch, tmp_path):
    runner = FakeRunner(tools={"yq": "/usr/bin/yq"}, outputs={("/usr/bin/yq",): GO_YQ_VERSION})

    assert _ensure(runner, PackageManager.APK, Arch.AMD64, tmp_path / "yq", fake_fetch) == (
        "/usr/bin/yq",
        None,
    )
    assert runner.calls == [["/usr/bin/yq", "--version"]]
    assert fake_fetch.urls == []


def test_yq_from_package_manager(fake_fetch, tmp_path):
    runner = FakeRunner(
        installs={("sudo", "apk", "add"): {"yq": "/usr/bin/yq"}},
        outputs={("/usr/bin/yq",): GO_YQ_VERSION},
    )

    exe, how = _ensure(runner, PackageManager.APK, Arch.AMD64, tmp_path / "yq", fake_fetch)

    assert (exe, how) == ("/usr/bin/yq", "package")
    assert runner.calls[0] == ["sudo", "apk", "add", "--no-cache", "yq"]
    assert fake_fetch.urls == []


def test_yq_falls_back_to_release_binary(fake_fetch, tmp_path):
    runner = FakeRunner(failures={("sudo", "apt", "install"): 100})
    target = tmp_path / "bin" / "yq"

    exe, how = _ensure(runner, PackageManager.APT, Arch.ARM64, target, fake_fetch)

    assert (exe, how) == (str(target), "binary")
    assert fake_fetch.urls == [
        "https://github.com/mikefarah/yq/releases/latest/download/yq_linux_arm64"
    ]
    last = runner.calls[-1]
    assert last[:4] == ["sudo", "install", "-m", "0755"]
    assert last[-1] == str(target)


def test_jq_wrapper_yq_on_path_is_replaced_by_release_binary(fake_fetch, tmp_path):
    runner = FakeRunner(
        tools={"yq": "/usr/bin/yq"}, outputs={("/usr/bin/yq",): JQ_WRAPPER_YQ_VERSION}
    )
    target = tmp_path / "bin" / "yq"

    exe, how = _ensure(runner, PackageManager.APT, Arch.AMD64, target, fake_fetch)

    assert (exe, how) == (str(target), "binary")
    assert not runner.ran("sudo", "apt", "install")
    assert runner.calls[-1][-1] == str(target)


def test_jq_wrapper_from_repositories_is_not_used(fake_fetch, tmp_path):
    runner = FakeRunner(
        installs={("sudo", "apt", "install"): {"yq": "/usr/bin/yq"}},
        outputs={("/usr/bin/yq",): JQ_WRAPPER_YQ_VERSION},
    )
    target = tmp_path / "bin" / "yq"

    exe, how = _ensure(runner, PackageManager.APT, Arch.AMD64, target, fake_fetch)

    assert (exe, how) == (str(target), "binary")
    assert runner.ran("sudo", "apt", "install", "-y", "yq")
    assert len(fake_fetch.urls) == 1


def test_earlier_release_binary_is_reused(fake_fetch, tmp_path):
    target = tmp_path / "yq"
    target.write_text("", encoding="utf-8")
    runner = FakeRunner(
        tools={"yq": "/usr/bin/yq"},
        outputs={("/usr/bin/yq",): JQ_WRAPPER_YQ_VERSION, (str(target),): GO_YQ_VERSION},
    )

    assert _ensure(runner, PackageManager.APT, Arch.AMD64, target, fake_fetch) == (str(target), None)
    assert fake_fetch.urls == []


@pytest.mark.parametrize(
    "output,expected",
    [
        (GO_YQ_VERSION, True),
        ("yq (https://github.com/mikefarah/yq/) version 3.4.1\n", False),
        (JQ_WRAPPER_YQ_VERSION, False),
        ("", False),
    ],
)
def test_yq_flavor_check(output, expected):
    runner = FakeRunner(outputs={("yq",): output})
    assert is_mikefarah_yq(runner, "yq") is expected


def test_npm_ci_with_lockfile(app_dir):
    (app_dir / "package-lock.json").write_text("{}", encoding="utf-8")
    runner = FakeRunner()
    prepare_node_env(app_dir, runner)
    assert runner.calls == [["npm", "ci"]]
    assert runner.cwds == [app_dir]


def test_npm_install_without_lockfile(app_dir):
    runner = FakeRunner()
    prepare_node_env(app_dir, runner)
    assert runner.calls == [["npm", "install"]]


def test_no_package_json_skips_npm(tmp_path):
    runner = FakeRunner()
    prepare_node_env(tmp_path, runner)
    assert runner.calls == []


def test_tool_version_fallback():
    runner = FakeRunner(outputs={("node",): "v18.20.4\n"}, failures={("yq",): 127})
    assert tool_version(runner, "node", "-v") == "v18.20.4"
    assert tool_version(runner, "yq", "--version") == "installed"
