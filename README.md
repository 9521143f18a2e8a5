# cuppa

Comprehensive Upstream Provider Polling Assistant.

`cuppa` is a library that takes the location of a source archive you already
package and asks the upstream it came from which releases exist and which is
the newest stable one. It is meant for distribution maintainers who want to
know when a package has fallen behind.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Providers

Each provider lives in its own module under `cuppa.providers` and subclasses
`cuppa.providers.base.Provider`.

| Class                 | Module                          | Recognises archives from                          |
|-----------------------|---------------------------------|---------------------------------------------------|
| `CpanProvider`        | `cuppa.providers.cpan`          | `cpan.org` author directories                     |
| `GitHubProvider`      | `cuppa.providers.github`        | `github.com/<owner>/<repo>`                       |
| `GitLabProvider`      | `cuppa.providers.gitlab`        | `gitlab.com/<owner>/<repo>`                       |
| `GitProvider`         | `cuppa.providers.git`           | anything ending in `.git` or prefixed with `git|` |
| `GnomeProvider`       | `cuppa.providers.gnome`         | GNOME `sources/` download areas                   |
| `GnuProvider`         | `cuppa.providers.gnu`           | `/gnu/<project>/` mirror paths                    |
| `HackageProvider`     | `cuppa.providers.hackage`       | `hackage.haskell.org/package/...` tarballs        |
| `KdeProvider`         | `cuppa.providers.kde`           | `download.kde.org` paths                          |
| `LaunchpadProvider`   | `cuppa.providers.launchpad`     | `launchpad.net/<project>/.../+download/` tarballs |
| `PyPIProvider`        | `cuppa.providers.pypi`          | `packages/` paths on PyPI hosts                   |
| `SourceForgeProvider` | `cuppa.providers.sourceforge`   | `sourceforge.net/projects/...` files              |

Every provider has the same three methods:

- `match(query)` returns the provider's name for the package behind a URL, or
  `None` if the URL is not one it handles.
- `releases(name)` returns a `ResultSet` of stable releases.
- `latest(name)` returns the newest stable release as a `Result`.

When a query fails, `releases` and `latest` raise `NotFoundError` (the upstream
answered but has nothing) or `UnavailableError` (it could not be reached or
answered with something unexpected). Both derive from `ProviderError` in
`cuppa.results`, and each carries a `status` from the `Status` enum.

Some notes on individual providers:

- `GitProvider` runs `git ls-remote --tags`, so `git` must be on your `PATH`.
- `GnuProvider` lists the project directory over anonymous FTP on
  `mirrors.rit.edu`.
- `KdeProvider` downloads the full `ls-lR.bz2` listing of the download site
  once per provider instance and reads releases from it.
- `GitHubProvider` uses the GraphQL API; see Configuration below.

Releases whose version contains words such as `rc`, `alpha`, `beta`, `dev`,
`unstable`, `eap` or `master` are treated as unstable and left out. GNOME
releases with an odd minor number are left out too.

## Example

```python
from cuppa.providers.git import GitProvider
from cuppa.providers.github import GitHubProvider
from cuppa.providers.pypi import PyPIProvider
from cuppa.results import ProviderError

url = "https://git.example.com/project.git"
for provider in (GitHubProvider(), PyPIProvider(), GitProvider()):
    name = provider.match(url)
    if not name:
        continue
    try:
        result = provider.latest(name)
    except ProviderError:
        continue
    print(result.format_simple(), end="")
```

`Result.format()` renders a labelled block (name, version, location and
publication date), and `Result.format_simple()` just `"<version> <location>"`.
`ResultSet.last()` sorts the set and gives its newest entry, `ResultSet.first()`
the first one added, and `ResultSet.format_all()` renders the whole set under a
summary header.

Versions are parsed with `cuppa.version.parse_version`, which splits a string
such as `v1.2.3rc1` into the pieces `1`, `2`, `3`, `rc`, `1` and compares them
numerically where it can (`Version.compare`, `Version.less`).
`Version.find_date()` reads versions such as `20180102` or `2018.01.02` as
dates, which are then used to order results that carry no publication date.

## Configuration

`GitHubProvider` sends an access token when one is configured. Put it in the
TOML file `~/.config/cuppa`:

```toml
[github]
key = "token"
```

`cuppa.config.load_config(path)` reads that file (or the one at `path`) into a
`Config`; a missing or unreadable file simply means no token is sent. You can
also pass a `Config` to `GitHubProvider(config=...)` directly.

## What it does not do

- There is no command-line program; the package is used from Python as shown
  above.
- There is no single list of all providers to try in turn; pick the provider
  classes you need, as in the example.
- Apache-style directory listings on freedesktop.org and x.org, JetBrains
  product downloads and Ruby gems are not covered by any provider.