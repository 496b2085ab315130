"""Hello World -- the simplest bladewire example.

Compile a template from a string and render it with context variables.
No templates directory needed.

Run:
    python app.py
"""

from bladewire import Environment

env = Environment()

# Compile from string
template = env.from_string("Hello, {{ name }}!@if(excited) :)@endif")

# Render with context
output = template.render(name="World", excited=False)


def main() -> None:
    print(output)
    print()

    # Multiple renders with different context
    for name in ["Blade", "Wire", "<Python>"]:
        print(template.render(name=name, excited=True))


if __name__ == "__main__":
    main()
