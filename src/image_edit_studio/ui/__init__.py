"""
Desktop UI components.

- MainWindow: One studio session in a window
- ImagePanel / ImagePane: Image display widgets
- presenter: Pane layout and status text, independent of Qt
"""
