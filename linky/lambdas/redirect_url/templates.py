import html


PASSWORD_PROMPT = """<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>You are accessing a protected URL</title>
</head>
<body>
  <form method="POST" action="{action}">
    <label for="password">Enter password</label>
    <input type="password" id="password" name="password" autofocus required>
    <button type="submit">Continue</button>
  </form>
  {error}
</body>
</html>
"""


def render_password_prompt(slug: str, incorrect: bool = False) -> str:
    error = '<p role="alert">Incorrect password. Please try again.</p>' if incorrect else ''
    return PASSWORD_PROMPT.format(action=html.escape(f'/{slug}', quote=True), error=error)
